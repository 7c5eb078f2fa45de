"""Errors raised while producing calendar feeds."""


class FeedError(Exception):
    """Base class for feed generation errors."""

    kind = 'feed'


class AcquisitionError(FeedError):
    """Event list could not be fetched, or came back empty."""

    kind = 'acquisition'


class InvalidEventDateError(FeedError):
    """An event's date is not a base-10 epoch timestamp."""

    kind = 'invalid_date'

    def __init__(self, event_name: str, value: str):
        self.event_name = event_name
        self.value = value
        super().__init__(
            f"Event '{event_name}' has a non-numeric date: {value!r}"
        )


class SerializationError(FeedError):
    """Calendar entries could not be serialized to iCalendar."""

    kind = 'serialization'


class PersistenceError(FeedError):
    """A serialized feed could not be written or uploaded."""

    kind = 'persistence'
