"""Description text for UFC calendar entries."""
from datetime import datetime
from typing import List, Optional, Sequence

import pytz

from processor.models import RawEvent

SEPARATOR = '-' * 20
DEFAULT_STAMP_TIMEZONE = 'America/Toronto'


def build_description(
    event: RawEvent,
    main_start: datetime,
    generated_at: datetime,
    stamp_timezone: str = DEFAULT_STAMP_TIMEZONE
) -> str:
    """
    Build the free-text body of a calendar entry.

    Sections are emitted in a fixed order: fight card, main card, prelims,
    early prelims, event URL, and an "Accurate as of" footer stamped with
    the time the feed was generated.

    Args:
        event: Raw event to describe
        main_start: Resolved start of the main card
        generated_at: Time the feed is being generated
        stamp_timezone: Timezone name the footer stamp is rendered in

    Returns:
        Description string
    """
    parts: List[str] = []

    if event.fight_card:
        parts.append(_join(event.fight_card))

    if event.main_card:
        parts.append(f"Main Card\n{SEPARATOR}\n{_join(event.main_card)}")

    if event.prelims:
        parts.append(_card_section(
            'Prelims', event.prelims, event.prelims_time, main_start
        ))

    if event.early_prelims:
        parts.append(_card_section(
            'Early Prelims', event.early_prelims,
            event.early_prelims_time, main_start
        ))

    parts.append(f"\n{event.url}\n")
    parts.append(
        f"\nAccurate as of {format_stamp(generated_at, stamp_timezone)}"
    )
    return ''.join(parts)


def _join(bouts: Sequence[str]) -> str:
    return '\n'.join(bouts) + '\n'


def _card_section(
    header: str,
    bouts: Sequence[str],
    section_time: Optional[str],
    main_start: datetime
) -> str:
    """Render a prelim section, noting how long before the main card it starts."""
    line = f"\n{header}"
    hours = hours_before_main(main_start, section_time)
    if hours is not None and hours > 0:
        line += f" ({format_hours(hours)} hrs before Main)"
    return f"{line}\n{SEPARATOR}\n{_join(bouts)}"


def hours_before_main(
    main_start: datetime,
    section_time: Optional[str]
) -> Optional[float]:
    """
    Hours between a section's start and the main card, unrounded.

    Returns None when the section time is missing or not an integer.
    """
    if not section_time:
        return None
    try:
        section_epoch = int(section_time.strip())
    except (ValueError, AttributeError):
        return None
    return (main_start.timestamp() - section_epoch) / 3600


def format_hours(hours: float) -> str:
    """Render hours without a trailing '.0' for whole values."""
    if float(hours).is_integer():
        return str(int(hours))
    return repr(hours)


def format_stamp(moment: datetime, timezone_name: str = DEFAULT_STAMP_TIMEZONE) -> str:
    """Format a moment like 'Oct 18, 8:05 PM EDT' in the given timezone."""
    local = moment.astimezone(pytz.timezone(timezone_name))
    hour = local.hour % 12 or 12
    return (
        f"{local.strftime('%b')} {local.day}, "
        f"{hour}:{local.strftime('%M %p')} {local.tzname()}"
    )
