"""Unit tests for EventProcessor."""
from datetime import datetime, timedelta

import pytest
import pytz

from processor.errors import InvalidEventDateError
from processor.event_processor import EventProcessor
from processor.models import RawEvent

GENERATED_AT = datetime(2023, 11, 1, 12, 0, tzinfo=pytz.utc)


@pytest.fixture
def processor():
    """Create an EventProcessor pinned to UTC."""
    return EventProcessor(timezone=pytz.utc)


@pytest.fixture
def sample_event():
    """Create a sample RawEvent."""
    return RawEvent(
        name='UFC 300',
        date='1700000000',
        location='T-Mobile Arena, Las Vegas',
        url='https://example.com/e1',
        fight_card=('A vs B',)
    )


class TestEventProcessor:
    """Test cases for EventProcessor class."""

    def test_to_calendar_entry(self, processor, sample_event):
        """Test mapping a valid event."""
        entry = processor.to_calendar_entry(sample_event, 'UFC', GENERATED_AT)

        assert entry.start == datetime(2023, 11, 14, 22, 13, 20, tzinfo=pytz.utc)
        assert entry.duration == timedelta(hours=3)
        assert entry.title == 'UFC 300'
        assert entry.location == 'T-Mobile Arena, Las Vegas'
        assert entry.uid == 'https://example.com/e1'
        assert entry.cal_name == 'UFC'
        assert entry.description.startswith('A vs B\n')
        assert entry.description.endswith('Accurate as of Nov 1, 8:00 AM EDT')

    def test_single_reminder(self, processor, sample_event):
        """Test that exactly one 30-minute display alarm is attached."""
        entry = processor.to_calendar_entry(sample_event, 'UFC', GENERATED_AT)

        assert len(entry.alarms) == 1
        alarm = entry.alarms[0]
        assert alarm.action == 'DISPLAY'
        assert alarm.minutes_before == 30
        assert alarm.description == 'UFC 300 starting soon!'

    def test_start_in_configured_timezone(self, sample_event):
        """Test that start is expressed in the processor's timezone."""
        processor = EventProcessor(timezone=pytz.timezone('America/New_York'))

        entry = processor.to_calendar_entry(sample_event, 'UFC', GENERATED_AT)

        assert (entry.start.year, entry.start.month, entry.start.day) == (2023, 11, 14)
        assert (entry.start.hour, entry.start.minute) == (17, 13)
        assert entry.start.timestamp() == 1700000000

    def test_start_defaults_to_local_time(self, sample_event):
        """Test that the default timezone yields an aware datetime."""
        entry = EventProcessor().to_calendar_entry(sample_event, 'UFC', GENERATED_AT)

        assert entry.start.tzinfo is not None
        assert entry.start.timestamp() == 1700000000

    def test_invalid_date_raises(self, processor):
        """Test that a non-numeric date fails loudly."""
        event = RawEvent(
            name='Broken Event',
            date='next saturday',
            location='Somewhere',
            url='https://example.com/broken'
        )

        with pytest.raises(InvalidEventDateError) as excinfo:
            processor.to_calendar_entry(event, 'UFC', GENERATED_AT)

        assert excinfo.value.event_name == 'Broken Event'
        assert excinfo.value.kind == 'invalid_date'

    def test_stable_fields_across_runs(self, processor, sample_event):
        """Test that only the description stamp differs between runs."""
        first = processor.to_calendar_entry(sample_event, 'UFC', GENERATED_AT)
        second = processor.to_calendar_entry(
            sample_event, 'UFC', GENERATED_AT + timedelta(hours=5)
        )

        for field_name in ('uid', 'title', 'start', 'duration', 'location'):
            assert getattr(first, field_name) == getattr(second, field_name)
        assert first.description != second.description

    def test_process_events_preserves_order(self, processor, sample_event):
        """Test mapping a list of events for one calendar."""
        other = RawEvent(
            name='UFC Fight Night 50',
            date='1700600000',
            location='Apex',
            url='https://example.com/e2'
        )

        entries = processor.process_events([sample_event, other], 'UFC-PPV', GENERATED_AT)

        assert [entry.uid for entry in entries] == [
            'https://example.com/e1',
            'https://example.com/e2',
        ]
        assert all(entry.cal_name == 'UFC-PPV' for entry in entries)
        assert all(entry.duration == timedelta(hours=3) for entry in entries)

    def test_validate_events(self, processor, sample_event):
        """Test that validation passes for numeric dates and fails otherwise."""
        processor.validate_events([sample_event])

        bad = RawEvent(
            name='Bad', date='', location='', url='https://example.com/bad'
        )
        with pytest.raises(InvalidEventDateError):
            processor.validate_events([sample_event, bad])

    @pytest.mark.parametrize('date', [
        '1_700_000_000',
        '+1700000000',
        '١٧٠٠',
        '17000.5',
        None,
    ])
    def test_validate_events_rejects_loose_integers(self, processor, date):
        """Test that only plain base-10 digits count as a date."""
        event = RawEvent(
            name='Loose', date=date, location='', url='https://example.com/loose'
        )

        with pytest.raises(InvalidEventDateError):
            processor.validate_events([event])

    def test_negative_epoch_accepted(self, processor):
        """Test that a leading minus sign is still a valid integer."""
        event = RawEvent(
            name='Early', date='-3600', location='', url='https://example.com/early'
        )

        entry = processor.to_calendar_entry(event, 'UFC', GENERATED_AT)

        assert entry.start == datetime(1969, 12, 31, 23, 0, tzinfo=pytz.utc)
