"""Entry points for UFC calendar feed generation (AWS Lambda and CLI)."""
import json
import logging
import os
import sys
import time
from datetime import datetime
from typing import Dict, Any

import pytz

from processor.event_processor import EventProcessor
from processor.feed_assembler import FeedAssembler
from scraper.ufc_events import UFCEventsScraper
from storage.feed_store import FeedStore


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def load_config(default_output_dir: str) -> Dict[str, Any]:
    """
    Read configuration from environment variables.

    Args:
        default_output_dir: Output directory when OUTPUT_DIR is unset

    Returns:
        Configuration dict
    """
    event_tz = os.environ.get('EVENT_TIMEZONE')
    return {
        'log_level': os.environ.get('LOG_LEVEL', 'INFO'),
        'output_dir': os.environ.get('OUTPUT_DIR', default_output_dir),
        'bucket': os.environ.get('FEED_BUCKET') or None,
        'prefix': os.environ.get('FEED_PREFIX', ''),
        'timeout_seconds': int(os.environ.get('TIMEOUT_SECONDS', '30')),
        'event_timezone': pytz.timezone(event_tz) if event_tz else None,
        'stamp_timezone': pytz.timezone(
            os.environ.get('STAMP_TIMEZONE', 'America/Toronto')
        ).zone,
    }


def build_assembler(config: Dict[str, Any]) -> FeedAssembler:
    """Wire the scraper, processor and store into a FeedAssembler."""
    return FeedAssembler(
        scraper=UFCEventsScraper(timeout=config['timeout_seconds']),
        processor=EventProcessor(
            timezone=config['event_timezone'],
            stamp_timezone=config['stamp_timezone']
        ),
        store=FeedStore(
            output_dir=config['output_dir'],
            bucket=config['bucket'],
            prefix=config['prefix']
        )
    )


def generate_feeds(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Run one feed generation and summarize it.

    Args:
        config: Configuration from load_config()

    Returns:
        Summary dict with 'success', 'message' and per-feed details
    """
    logger = logging.getLogger(__name__)
    start_time = time.time()
    logger.info(
        "Feed generation started",
        extra={
            'output_dir': config['output_dir'],
            'bucket': config['bucket'],
            'timeout_seconds': config['timeout_seconds']
        }
    )

    try:
        assembler = build_assembler(config)
        result = assembler.run(generated_at=datetime.now(pytz.utc))
    except Exception as e:
        duration = time.time() - start_time
        logger.error(
            f"Feed generation failed: {e}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return {
            'success': False,
            'message': 'Feed generation failed',
            'error': str(e),
            'error_type': type(e).__name__,
            'error_kind': getattr(e, 'kind', 'unexpected'),
            'duration_seconds': round(duration, 2)
        }

    duration = time.time() - start_time
    feeds = [
        {
            'feed': feed.feed_name,
            'success': feed.success,
            'events': feed.event_count,
            'location': feed.location,
            'size_bytes': feed.size_bytes,
            'error': feed.error,
            'error_kind': feed.error_kind
        }
        for feed in result.feeds
    ]

    if result.success:
        logger.info(
            "ICS generation complete",
            extra={'duration_seconds': round(duration, 2)}
        )
        message = 'Feeds generated successfully'
    else:
        failed = [feed.feed_name for feed in result.feeds if not feed.success]
        logger.error(f"Feed generation finished with failures: {failed}")
        message = 'One or more feeds failed'

    return {
        'success': result.success,
        'message': message,
        'statistics': {
            'events_fetched': result.events_fetched,
            'feeds': feeds,
            'duration_seconds': round(duration, 2)
        }
    }


def run_once(default_output_dir: str) -> Dict[str, Any]:
    """
    Configure logging, load configuration and generate the feeds.

    Invalid configuration is reported before any network request is made.

    Args:
        default_output_dir: Output directory when OUTPUT_DIR is unset

    Returns:
        Summary dict from generate_feeds(), or a failure summary
    """
    setup_logging(os.environ.get('LOG_LEVEL', 'INFO'))
    logger = logging.getLogger(__name__)

    try:
        config = load_config(default_output_dir)
    except (pytz.UnknownTimeZoneError, ValueError) as e:
        logger.error(
            f"Invalid configuration: {e}",
            extra={'error_type': type(e).__name__}
        )
        return {
            'success': False,
            'message': 'Invalid configuration',
            'error': str(e),
            'error_type': type(e).__name__,
            'error_kind': 'configuration'
        }

    return generate_feeds(config)


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler function for UFC calendar feed generation.

    Args:
        event: EventBridge event payload
        context: Lambda context object

    Returns:
        Response dict with statusCode and summary statistics
    """
    summary = run_once(default_output_dir='/tmp')
    return {
        'statusCode': 200 if summary['success'] else 500,
        'body': json.dumps(summary)
    }


def main() -> int:
    """Generate the feeds into the working directory; return the exit status."""
    summary = run_once(default_output_dir=os.getcwd())
    return 0 if summary['success'] else 1


if __name__ == '__main__':
    sys.exit(main())
