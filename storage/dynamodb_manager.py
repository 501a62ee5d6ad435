"""DynamoDB manager for calendar event storage operations."""
import logging
from typing import List, Optional

import boto3
from botocore.exceptions import ClientError

from processor.models import ProcessedEvent, SyncResult

logger = logging.getLogger(__name__)


class DynamoDBManager:
    """Calendar store backed by a DynamoDB table keyed on event_id."""

    def __init__(self, table_name: str):
        """
        Initialize DynamoDB client and table reference.

        Args:
            table_name: Name of the DynamoDB table
        """
        self.table_name = table_name
        self.dynamodb = boto3.resource('dynamodb')
        self.table = self.dynamodb.Table(table_name)
        logger.info(f"Initialized DynamoDBManager for table: {table_name}")

    def find_matching_event(self, event: ProcessedEvent) -> Optional[ProcessedEvent]:
        """
        Look up a stored event with the same title, location, start and end.

        The event_id is derived from exactly those fields, so a key lookup
        is enough.

        Args:
            event: Event to look for

        Returns:
            Stored ProcessedEvent or None
        """
        response = self.table.get_item(Key={'event_id': event.event_id})
        item = response.get('Item')
        if not item:
            return None
        return self._item_to_processed_event(item)

    def insert_event(self, event: ProcessedEvent) -> bool:
        """
        Insert an event unless one with the same event_id exists.

        Args:
            event: Event to insert

        Returns:
            True if inserted, False if it already existed

        Raises:
            ClientError: On any DynamoDB error other than the existence check
        """
        try:
            self.table.put_item(
                Item=self._processed_event_to_item(event),
                ConditionExpression='attribute_not_exists(event_id)'
            )
            return True
        except ClientError as e:
            if e.response['Error']['Code'] == 'ConditionalCheckFailedException':
                return False
            raise

    def sync_events(self, events: List[ProcessedEvent], live: bool = True) -> SyncResult:
        """
        Insert every event not already in the calendar.

        Args:
            events: Events to synchronize
            live: When False, only log what would be inserted

        Returns:
            SyncResult with counts of added and already existing events
        """
        logger.info(f"Starting sync process with {len(events)} events (live={live})")

        if not live:
            for event in events:
                logger.info(
                    f"Dry run, not inserting '{event.title}' "
                    f"{event.start} - {event.end} at {event.location}"
                )
            return SyncResult(added=0, existing=0, errors=[])

        added_count = 0
        existing_count = 0
        errors = []

        for event in events:
            try:
                if self.find_matching_event(event):
                    logger.info(f"Event already exists: '{event.title}' {event.start}")
                    existing_count += 1
                    continue

                if self.insert_event(event):
                    logger.info(f"Created event: '{event.title}' {event.start}")
                    added_count += 1
                else:
                    existing_count += 1

            except ClientError as e:
                error_msg = f"Error syncing event '{event.title}' {event.start}: {e}"
                logger.error(error_msg)
                errors.append(error_msg)
                # Continue with remaining events
                continue

        logger.info(
            f"Sync complete: {added_count} added, {existing_count} already existed, "
            f"{len(errors)} errors"
        )
        return SyncResult(added=added_count, existing=existing_count, errors=errors)

    def _item_to_processed_event(self, item: dict) -> Optional[ProcessedEvent]:
        """
        Convert DynamoDB item to ProcessedEvent object.

        Args:
            item: DynamoDB item dictionary

        Returns:
            ProcessedEvent object or None if conversion fails
        """
        try:
            return ProcessedEvent(
                event_id=item['event_id'],
                title=item['title'],
                description=item['description'],
                location=item.get('location'),
                start=item['start'],
                end=item['end'],
                all_day=bool(item['all_day']),
                time_zone=item['time_zone'],
                matched_rule=item.get('matched_rule', ''),
                last_updated=int(item['last_updated']),
                ttl=int(item['ttl'])
            )
        except (KeyError, ValueError) as e:
            logger.warning(f"Failed to convert item to ProcessedEvent: {e}")
            return None

    def _processed_event_to_item(self, event: ProcessedEvent) -> dict:
        """
        Convert ProcessedEvent object to DynamoDB item.

        Args:
            event: ProcessedEvent object

        Returns:
            DynamoDB item dictionary
        """
        item = {
            'event_id': event.event_id,
            'title': event.title,
            'description': event.description,
            'start': event.start,
            'end': event.end,
            'all_day': event.all_day,
            'time_zone': event.time_zone,
            'matched_rule': event.matched_rule,
            'last_updated': event.last_updated,
            'ttl': event.ttl
        }

        # Add optional fields if present
        if event.location:
            item['location'] = event.location

        return item
