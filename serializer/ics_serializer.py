"""iCalendar serialization of calendar entries."""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence

import pytz
from icalendar import Alarm, Calendar, Event, vText

from processor.errors import SerializationError
from processor.models import CalendarEntry

logger = logging.getLogger(__name__)

ICS_PRODID = '-//ufc-calendar//UFC Events Feed//EN'


@dataclass
class SerializationResult:
    """Either an error or a serialized iCalendar document."""
    error: Optional[SerializationError] = None
    value: Optional[str] = None


def serialize_entries(
    entries: Sequence[CalendarEntry],
    stamp: Optional[datetime] = None,
    cal_name: Optional[str] = None
) -> SerializationResult:
    """
    Serialize calendar entries into a single iCalendar document.

    Args:
        entries: Calendar entries to serialize
        stamp: DTSTAMP for every event (default: now, UTC)
        cal_name: Calendar name (default: taken from the first entry)

    Returns:
        SerializationResult holding either the error or the document
    """
    dtstamp = (stamp or datetime.now(pytz.utc)).astimezone(pytz.utc)

    try:
        cal = _create_calendar(entries, cal_name)
        for index, entry in enumerate(entries):
            _validate_entry(entry, index)
            cal.add_component(_create_event(entry, dtstamp))
        document = _format_output(cal)
    except SerializationError as e:
        logger.error(f"Calendar validation failed: {e}")
        return SerializationResult(error=e)
    except (ValueError, TypeError) as e:
        logger.error(f"Calendar encoding failed: {e}")
        return SerializationResult(error=SerializationError(str(e)))

    return SerializationResult(value=document)


def _create_calendar(
    entries: Sequence[CalendarEntry],
    cal_name: Optional[str]
) -> Calendar:
    cal = Calendar()
    cal.add('PRODID', ICS_PRODID)
    cal.add('VERSION', '2.0')
    cal.add('CALSCALE', 'GREGORIAN')
    cal.add('METHOD', 'PUBLISH')
    name = cal_name or (entries[0].cal_name if entries else None)
    if name:
        cal.add('X-WR-CALNAME', name)
    return cal


def _validate_entry(entry: CalendarEntry, index: int) -> None:
    """
    Reject entries a calendar client could not import.

    Raises:
        SerializationError: If a required field is missing or malformed
    """
    label = entry.title or f"entry {index + 1}"
    if not entry.uid:
        raise SerializationError(f"'{label}' is missing a uid")
    if not entry.title:
        raise SerializationError(f"Entry {index + 1} is missing a title")
    if entry.start.tzinfo is None or entry.start.utcoffset() is None:
        raise SerializationError(f"'{label}' has a naive start time")
    if entry.duration <= timedelta(0):
        raise SerializationError(f"'{label}' has a non-positive duration")


def _create_event(entry: CalendarEntry, dtstamp: datetime) -> Event:
    ve = Event()
    ve.add('UID', entry.uid)
    ve.add('DTSTAMP', dtstamp)
    ve.add('DTSTART', entry.start.astimezone(pytz.utc))
    ve.add('DURATION', entry.duration)
    ve.add('SUMMARY', vText(entry.title))
    ve.add('DESCRIPTION', vText(entry.description))
    if entry.location:
        ve.add('LOCATION', vText(entry.location))
    ve.add('URL', entry.uid)

    for reminder in entry.alarms:
        alarm = Alarm()
        alarm.add('ACTION', reminder.action)
        alarm.add('DESCRIPTION', reminder.description)
        alarm.add('TRIGGER', timedelta(minutes=-reminder.minutes_before))
        ve.add_component(alarm)

    return ve


def _format_output(cal: Calendar) -> str:
    """Encode the calendar with CRLF line endings per RFC 5545."""
    decoded = cal.to_ical().decode('utf-8')
    return decoded.replace('\r\n', '\n').replace('\n', '\r\n')
