"""Data models for event processing."""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class RawEvent:
    """Raw event from the UFC events scraper."""
    name: str
    date: str
    location: str
    url: str
    fight_card: Tuple[str, ...] = ()
    main_card: Tuple[str, ...] = ()
    prelims: Tuple[str, ...] = ()
    early_prelims: Tuple[str, ...] = ()
    prelims_time: Optional[str] = None
    early_prelims_time: Optional[str] = None


@dataclass(frozen=True)
class Alarm:
    """Reminder attached to a calendar entry."""
    description: str
    minutes_before: int = 30
    action: str = 'DISPLAY'


@dataclass(frozen=True)
class CalendarEntry:
    """Calendar-ready record built from a RawEvent."""
    start: datetime
    duration: timedelta
    title: str
    description: str
    location: str
    uid: str
    cal_name: str
    alarms: Tuple[Alarm, ...]


@dataclass
class FeedResult:
    """Result of building a single feed."""
    feed_name: str
    success: bool
    event_count: int = 0
    location: Optional[str] = None
    size_bytes: int = 0
    error: Optional[str] = None
    error_kind: Optional[str] = None


@dataclass
class RunResult:
    """Result of a full feed generation run."""
    events_fetched: int
    feeds: List[FeedResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return bool(self.feeds) and all(feed.success for feed in self.feeds)
