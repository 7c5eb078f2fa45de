"""Assembles the full and pay-per-view UFC calendar feeds."""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Sequence

from processor.classifier import filter_pay_per_view
from processor.errors import (
    AcquisitionError,
    PersistenceError,
    SerializationError,
)
from processor.event_processor import EventProcessor
from processor.models import FeedResult, RawEvent, RunResult
from serializer.ics_serializer import serialize_entries

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedSpec:
    """Calendar name and file name of one output feed."""
    cal_name: str
    filename: str


ALL_EVENTS_FEED = FeedSpec(cal_name='UFC', filename='UFC.ics')
PPV_FEED = FeedSpec(cal_name='UFC-PPV', filename='UFC-PPV.ics')


class FeedAssembler:
    """Fetches events once and builds every feed from them."""

    def __init__(
        self,
        scraper,
        processor: EventProcessor,
        store,
        serializer: Callable = serialize_entries
    ):
        """
        Initialize the feed assembler.

        Args:
            scraper: Acquisition collaborator exposing fetch_all_events()
            processor: EventProcessor used to map events to entries
            store: FeedStore exposing write(filename, content)
            serializer: Function turning entries into a SerializationResult
        """
        self.scraper = scraper
        self.processor = processor
        self.store = store
        self.serializer = serializer

    def run(self, generated_at: datetime) -> RunResult:
        """
        Produce the full feed and the PPV feed.

        A failure in one feed is recorded in its FeedResult and does not
        stop the other feed from being built.

        Args:
            generated_at: Time stamped into every description

        Returns:
            RunResult with one FeedResult per feed

        Raises:
            AcquisitionError: If no events could be fetched
            InvalidEventDateError: If any event has a non-numeric date
        """
        events = self.fetch_events()
        self.processor.validate_events(events)

        result = RunResult(events_fetched=len(events))
        result.feeds.append(
            self.build_feed(ALL_EVENTS_FEED, events, generated_at)
        )

        ppv_events = filter_pay_per_view(events)
        logger.info(f"{len(ppv_events)} of {len(events)} events are pay-per-view")
        result.feeds.append(
            self.build_feed(PPV_FEED, ppv_events, generated_at)
        )
        return result

    def fetch_events(self) -> List[RawEvent]:
        """
        Fetch the full event list.

        Raises:
            AcquisitionError: If the fetch fails or returns no events
        """
        logger.info("Fetching UFC events")
        try:
            events = self.scraper.fetch_all_events()
        except Exception as e:
            raise AcquisitionError(f"Failed to fetch events: {e}") from e

        if not events:
            raise AcquisitionError("No events retrieved.")

        logger.info(f"Retrieved {len(events)} events")
        return list(events)

    def build_feed(
        self,
        feed: FeedSpec,
        events: Sequence[RawEvent],
        generated_at: datetime
    ) -> FeedResult:
        """
        Map, serialize and persist a single feed.

        Args:
            feed: Which feed to build
            events: Events belonging to the feed
            generated_at: Time stamped into every description

        Returns:
            FeedResult describing success or the failure kind
        """
        logger.info(f"Generating {feed.filename} ({len(events)} events)")

        try:
            entries = self.processor.process_events(
                events, feed.cal_name, generated_at
            )
            serialized = self.serializer(entries, cal_name=feed.cal_name)
            if serialized.error is not None:
                raise serialized.error
            location = self.store.write(feed.filename, serialized.value)
        except (SerializationError, PersistenceError) as e:
            logger.error(
                f"Failed to generate {feed.filename}: {e}",
                extra={'error_type': type(e).__name__},
                exc_info=True
            )
            return FeedResult(
                feed_name=feed.cal_name,
                success=False,
                event_count=len(events),
                error=str(e),
                error_kind=e.kind
            )

        return FeedResult(
            feed_name=feed.cal_name,
            success=True,
            event_count=len(events),
            location=location,
            size_bytes=len(serialized.value.encode('utf-8'))
        )
