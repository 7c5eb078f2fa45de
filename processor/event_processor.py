"""Event processor mapping raw UFC events to calendar entries."""
import logging
from datetime import datetime, timedelta, timezone as dt_timezone, tzinfo
from typing import Iterable, List, Optional

from processor.description import DEFAULT_STAMP_TIMEZONE, build_description
from processor.errors import InvalidEventDateError
from processor.models import Alarm, CalendarEntry, RawEvent

logger = logging.getLogger(__name__)


class EventProcessor:
    """Processor for converting raw events into calendar entries."""

    EVENT_DURATION = timedelta(hours=3)
    REMINDER_MINUTES = 30

    def __init__(
        self,
        timezone: Optional[tzinfo] = None,
        stamp_timezone: str = DEFAULT_STAMP_TIMEZONE
    ):
        """
        Initialize the event processor.

        Args:
            timezone: Timezone event start times are expressed in
                (default: the process's local timezone)
            stamp_timezone: Timezone name for the "Accurate as of" footer
        """
        self.timezone = timezone
        self.stamp_timezone = stamp_timezone

    def validate_events(self, raw_events: Iterable[RawEvent]) -> None:
        """
        Check that every event carries a numeric date.

        Raises:
            InvalidEventDateError: On the first event with a non-numeric date
        """
        for event in raw_events:
            self._parse_epoch(event)

    def process_events(
        self,
        raw_events: Iterable[RawEvent],
        cal_name: str,
        generated_at: datetime
    ) -> List[CalendarEntry]:
        """
        Map raw events to calendar entries for one calendar.

        Args:
            raw_events: Raw events to map
            cal_name: Calendar the entries belong to
            generated_at: Time the feed is being generated

        Returns:
            List of CalendarEntry objects, in input order
        """
        entries = [
            self.to_calendar_entry(event, cal_name, generated_at)
            for event in raw_events
        ]
        logger.info(f"Mapped {len(entries)} events for calendar '{cal_name}'")
        return entries

    def to_calendar_entry(
        self,
        event: RawEvent,
        cal_name: str,
        generated_at: datetime
    ) -> CalendarEntry:
        """
        Convert a single raw event into a calendar entry.

        Args:
            event: Raw event
            cal_name: Calendar the entry belongs to
            generated_at: Time the feed is being generated

        Returns:
            CalendarEntry object

        Raises:
            InvalidEventDateError: If the event date is not numeric
        """
        start = self.resolve_start(event)
        description = build_description(
            event, start, generated_at, self.stamp_timezone
        )

        return CalendarEntry(
            start=start,
            duration=self.EVENT_DURATION,
            title=event.name,
            description=description,
            location=event.location,
            uid=event.url,
            cal_name=cal_name,
            alarms=(
                Alarm(
                    description=f"{event.name} starting soon!",
                    minutes_before=self.REMINDER_MINUTES
                ),
            )
        )

    def resolve_start(self, event: RawEvent) -> datetime:
        """Resolve the event's epoch date to an aware local datetime."""
        epoch = self._parse_epoch(event)
        if self.timezone is None:
            return datetime.fromtimestamp(epoch, tz=dt_timezone.utc).astimezone()
        return datetime.fromtimestamp(epoch, tz=self.timezone)

    def _parse_epoch(self, event: RawEvent) -> int:
        # ASCII digits with an optional leading '-'; int() also takes '1_700' and '+1700'
        value = event.date.strip() if isinstance(event.date, str) else ''
        digits = value[1:] if value.startswith('-') else value
        if not (digits.isascii() and digits.isdigit()):
            logger.warning(
                f"Invalid date for event '{event.name}': {event.date!r}"
            )
            raise InvalidEventDateError(event.name, event.date)
        return int(value)
