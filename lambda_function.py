"""AWS Lambda handler for Skint Events Calendar Sync."""
import json
import logging
import os
import time
from datetime import date, datetime
from typing import Any, Dict, List, Tuple
from zoneinfo import ZoneInfo

from config import ConfigError, HandlerConfig
from processor.event_processor import EventProcessor
from processor.fragment_extractor import FragmentExtractor
from processor.listing_parser import ListingParser
from processor.models import ParseReport
from scraper.listing_reader import ListingReader
from scraper.skint_feed import PostNotFound, SkintFeedScraper
from storage.dynamodb_manager import DynamoDBManager


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

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def fetch_source(config: HandlerConfig) -> Tuple[List[Any], date]:
    """
    Fetch the fragments to parse and the anchor date they are relative to.

    Returns:
        Tuple of (paragraphs or listing blocks, anchor date)
    """
    if config.mode == 'LISTING':
        reader = ListingReader(timeout=config.timeout_seconds)
        blocks = reader.split_blocks(reader.fetch_listing(config.listing_url))
        anchor = config.anchor_date or datetime.now(ZoneInfo(config.time_zone)).date()
        return blocks, anchor

    scraper = SkintFeedScraper(
        timeout=config.timeout_seconds,
        time_zone=config.time_zone,
        rss_url=config.rss_url,
        post_url=config.post_url
    )

    if config.mode == 'RSS':
        paragraphs, published = scraper.fetch_rss_post(config.guid)
        return paragraphs, config.anchor_date or published

    return scraper.fetch_http_post(config.guid), config.anchor_date


def parse_source(config: HandlerConfig, items: List[Any], anchor: date) -> ParseReport:
    """Parse fetched fragments with the front end matching the feed mode."""
    if config.mode == 'LISTING':
        return ListingParser().parse_blocks(items, anchor)
    return FragmentExtractor().extract_all(items, anchor)


def _response(status_code: int, body: Dict[str, Any], start_time: float) -> Dict[str, Any]:
    body['duration_seconds'] = round(time.time() - start_time, 2)
    return {'statusCode': status_code, 'body': json.dumps(body)}


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler function for Skint Events Calendar Sync.

    Args:
        event: EventBridge event payload, optionally carrying "guid"
            and "anchor_date"
        context: Lambda context object

    Returns:
        Response dict with statusCode and summary statistics
    """
    setup_logging(os.environ.get('LOG_LEVEL', 'INFO'))
    logger = logging.getLogger(__name__)
    start_time = time.time()

    try:
        config = HandlerConfig.from_env(payload=event if isinstance(event, dict) else None)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return _response(400, {
            'message': 'Invalid configuration',
            'error': str(e)
        }, start_time)

    setup_logging(config.log_level)

    logger.info(
        "Lambda execution started",
        extra={
            'mode': config.mode,
            'guid': config.guid,
            'table_name': config.table_name,
            'live': config.live
        }
    )

    try:
        # Fetch source text with error handling
        try:
            items, anchor = fetch_source(config)
            logger.info(f"Fetched {len(items)} fragments anchored at {anchor.isoformat()}")
        except PostNotFound as e:
            logger.error(str(e))
            return _response(404, {
                'message': 'Post not found',
                'error': str(e)
            }, start_time)
        except Exception as e:
            logger.error(
                f"Failed to fetch source after retries: {str(e)}",
                extra={'error_type': type(e).__name__},
                exc_info=True
            )
            return _response(500, {
                'message': 'Failed to fetch events',
                'error': str(e),
                'error_type': type(e).__name__
            }, start_time)

        report = parse_source(config, items, anchor)
        processed_events = EventProcessor(time_zone=config.time_zone).process_drafts(
            report.events
        )

        # Synchronize with the calendar store with error handling
        try:
            dynamodb_manager = DynamoDBManager(table_name=config.table_name)
            sync_result = dynamodb_manager.sync_events(processed_events, live=config.live)
        except Exception as e:
            logger.error(
                f"Error during calendar sync: {str(e)}",
                extra={'error_type': type(e).__name__},
                exc_info=True
            )
            return _response(500, {
                'message': 'Failed to sync events with calendar',
                'error': str(e),
                'error_type': type(e).__name__
            }, start_time)

        logger.info(
            "Lambda execution completed successfully",
            extra={
                'events_added': sync_result.added,
                'events_existing': sync_result.existing,
                'fragments_skipped': len(report.diagnostics),
                'errors': sync_result.errors
            }
        )

        return _response(200, {
            'message': 'Sync completed successfully',
            'statistics': {
                'fragments_fetched': len(items),
                'events_parsed': len(report.events),
                'fragments_skipped': len(report.diagnostics),
                'occurrences_processed': len(processed_events),
                'events_added': sync_result.added,
                'events_existing': sync_result.existing,
                'live': config.live
            },
            'skipped': [
                {
                    'error_type': diagnostic.error_type,
                    'message': diagnostic.message,
                    'rule': diagnostic.rule,
                    'matched': diagnostic.matched
                }
                for diagnostic in report.diagnostics
            ],
            'errors': sync_result.errors
        }, start_time)

    except Exception as e:
        logger.error(
            f"Lambda execution failed: {str(e)}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return _response(500, {
            'message': 'Sync failed',
            'error': str(e),
            'error_type': type(e).__name__
        }, start_time)
