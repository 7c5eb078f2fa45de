"""Pay-per-view classification of UFC events."""
import re
from typing import Iterable, List

from processor.models import RawEvent

# Numbered events ("UFC 300") are pay-per-views; "UFC Fight Night" cards are not.
PPV_PATTERN = re.compile(r"UFC\s+[0-9]+")


def is_pay_per_view(event: RawEvent) -> bool:
    """Return True if the event name follows the numbered PPV convention."""
    return PPV_PATTERN.search(event.name) is not None


def filter_pay_per_view(events: Iterable[RawEvent]) -> List[RawEvent]:
    """Keep only pay-per-view events, preserving order."""
    return [event for event in events if is_pay_per_view(event)]
