"""Unit tests for DynamoDB manager."""
import time
from datetime import datetime, timedelta
from unittest.mock import patch

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from processor.models import ProcessedEvent
from storage.dynamodb_manager import DynamoDBManager


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake credentials and region for moto."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')


@pytest.fixture
def dynamodb_table(aws_credentials):
    """Create a mock DynamoDB table for testing."""
    with mock_aws():
        dynamodb = boto3.resource('dynamodb', region_name='us-east-1')

        table = dynamodb.create_table(
            TableName='test-skint-events',
            KeySchema=[
                {'AttributeName': 'event_id', 'KeyType': 'HASH'}
            ],
            AttributeDefinitions=[
                {'AttributeName': 'event_id', 'AttributeType': 'S'}
            ],
            BillingMode='PAY_PER_REQUEST'
        )

        yield table


@pytest.fixture
def dynamodb_manager(dynamodb_table):
    """Create DynamoDBManager instance with mock table."""
    return DynamoDBManager('test-skint-events')


def make_event(event_id='test-event-123', title='Test Event', location='the Pier (Brooklyn)'):
    return ProcessedEvent(
        event_id=event_id,
        title=title,
        description='This is a test event',
        location=location,
        start='2024-06-08T11:00:00',
        end='2024-06-08T18:00:00',
        all_day=False,
        time_zone='America/New_York',
        matched_rule='date_then_time',
        last_updated=int(time.time()),
        ttl=int((datetime.now() + timedelta(days=90)).timestamp())
    )


@pytest.fixture
def sample_event():
    """Create a sample ProcessedEvent for testing."""
    return make_event()


def test_find_matching_event_missing(dynamodb_manager, sample_event):
    """Test find_matching_event returns None for an unknown event."""
    assert dynamodb_manager.find_matching_event(sample_event) is None


def test_insert_event_then_find(dynamodb_manager, sample_event):
    """Test an inserted event can be found again."""
    assert dynamodb_manager.insert_event(sample_event) is True

    found = dynamodb_manager.find_matching_event(sample_event)

    assert found == sample_event


def test_insert_event_twice(dynamodb_manager, sample_event):
    """Test that a second insert of the same event is refused."""
    assert dynamodb_manager.insert_event(sample_event) is True
    assert dynamodb_manager.insert_event(sample_event) is False

    assert dynamodb_manager.table.scan()['Count'] == 1


def test_insert_event_without_location(dynamodb_manager):
    """Test that an event without location round-trips with None."""
    event = make_event(location=None)

    dynamodb_manager.insert_event(event)
    item = dynamodb_manager.table.get_item(Key={'event_id': event.event_id})['Item']

    assert 'location' not in item
    assert dynamodb_manager.find_matching_event(event).location is None


def test_sync_events_add_new(dynamodb_manager, sample_event):
    """Test sync_events adds new events."""
    result = dynamodb_manager.sync_events([sample_event])

    assert result.added == 1
    assert result.existing == 0
    assert len(result.errors) == 0
    assert dynamodb_manager.table.scan()['Count'] == 1


def test_sync_events_existing_not_duplicated(dynamodb_manager, sample_event):
    """Test that running the same sync twice creates nothing the second time."""
    dynamodb_manager.sync_events([sample_event])

    result = dynamodb_manager.sync_events([sample_event])

    assert result.added == 0
    assert result.existing == 1
    assert dynamodb_manager.table.scan()['Count'] == 1


def test_sync_events_mixed(dynamodb_manager):
    """Test sync_events with one existing and two new events."""
    existing = make_event(event_id='event-1', title='Event 1')
    dynamodb_manager.insert_event(existing)

    result = dynamodb_manager.sync_events([
        existing,
        make_event(event_id='event-2', title='Event 2'),
        make_event(event_id='event-3', title='Event 3'),
    ])

    assert result.added == 2
    assert result.existing == 1
    assert dynamodb_manager.table.scan()['Count'] == 3


def test_sync_events_dry_run(dynamodb_manager, sample_event):
    """Test that a dry run writes nothing."""
    result = dynamodb_manager.sync_events([sample_event], live=False)

    assert result.added == 0
    assert result.existing == 0
    assert result.errors == []
    assert dynamodb_manager.table.scan()['Count'] == 0


def test_sync_events_records_client_errors(dynamodb_manager):
    """Test that a failing event is recorded and the rest still sync."""
    failing = make_event(event_id='event-fail', title='Broken Event')
    working = make_event(event_id='event-ok', title='Working Event')
    real_get_item = dynamodb_manager.table.get_item

    def get_item(**kwargs):
        if kwargs['Key']['event_id'] == 'event-fail':
            raise ClientError(
                {'Error': {'Code': 'InternalServerError', 'Message': 'boom'}},
                'GetItem'
            )
        return real_get_item(**kwargs)

    with patch.object(dynamodb_manager.table, 'get_item', side_effect=get_item):
        result = dynamodb_manager.sync_events([failing, working])

    assert result.added == 1
    assert len(result.errors) == 1
    assert 'Broken Event' in result.errors[0]
