"""Unit tests for FeedStore."""
from unittest.mock import patch

import boto3
import pytest
from moto import mock_aws

from processor.errors import PersistenceError
from storage.feed_store import FeedStore

ICS = "BEGIN:VCALENDAR\r\nX-WR-CALNAME:UFC\r\nEND:VCALENDAR\r\n"


@pytest.fixture
def aws_env(monkeypatch):
    """Fake AWS credentials so boto3 never reaches a real account."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')


@pytest.fixture
def s3_bucket(aws_env):
    """Create a mock S3 bucket for testing."""
    with mock_aws():
        s3 = boto3.client('s3', region_name='us-east-1')
        s3.create_bucket(Bucket='test-ufc-feeds')
        yield s3


class TestFeedStore:
    """Test cases for FeedStore class."""

    def test_write_local_file(self, tmp_path):
        """Test writing a feed to the output directory."""
        store = FeedStore(output_dir=str(tmp_path))

        location = store.write('UFC.ics', ICS)

        assert location == str(tmp_path / 'UFC.ics')
        assert (tmp_path / 'UFC.ics').read_bytes() == ICS.encode('utf-8')

    def test_write_overwrites_previous_feed(self, tmp_path):
        """Test that each write fully replaces the previous file."""
        store = FeedStore(output_dir=str(tmp_path))
        (tmp_path / 'UFC.ics').write_text('stale content that is much longer ' * 10)

        store.write('UFC.ics', ICS)

        assert (tmp_path / 'UFC.ics').read_bytes() == ICS.encode('utf-8')
        assert sorted(p.name for p in tmp_path.iterdir()) == ['UFC.ics']

    def test_write_creates_output_dir(self, tmp_path):
        """Test that a missing output directory is created."""
        output_dir = tmp_path / 'feeds' / 'public'
        store = FeedStore(output_dir=str(output_dir))

        store.write('UFC-PPV.ics', ICS)

        assert (output_dir / 'UFC-PPV.ics').exists()

    def test_write_encodes_utf8(self, tmp_path):
        """Test that non-ASCII content is written as UTF-8."""
        store = FeedStore(output_dir=str(tmp_path))
        content = "SUMMARY:UFC 306: O'Malley vs Dvalishvili – Noche\r\n"

        store.write('UFC.ics', content)

        assert (tmp_path / 'UFC.ics').read_bytes() == content.encode('utf-8')

    def test_write_failure_raises_persistence_error(self, tmp_path):
        """Test that an unwritable output directory is a PersistenceError."""
        blocker = tmp_path / 'not-a-dir'
        blocker.write_text('')
        store = FeedStore(output_dir=str(blocker))

        with pytest.raises(PersistenceError):
            store.write('UFC.ics', ICS)

    def test_upload_to_s3(self, tmp_path, s3_bucket):
        """Test publishing a feed to S3 alongside the local copy."""
        store = FeedStore(
            output_dir=str(tmp_path),
            bucket='test-ufc-feeds',
            prefix='calendars/'
        )

        location = store.write('UFC.ics', ICS)

        assert location == 's3://test-ufc-feeds/calendars/UFC.ics'
        assert (tmp_path / 'UFC.ics').exists()
        obj = s3_bucket.get_object(Bucket='test-ufc-feeds', Key='calendars/UFC.ics')
        assert obj['Body'].read() == ICS.encode('utf-8')
        assert obj['ContentType'] == 'text/calendar; charset=utf-8'

    def test_upload_missing_bucket_raises(self, tmp_path, s3_bucket):
        """Test that an S3 error is a PersistenceError."""
        store = FeedStore(output_dir=str(tmp_path), bucket='no-such-bucket')

        with pytest.raises(PersistenceError) as excinfo:
            store.write('UFC.ics', ICS)

        assert 'no-such-bucket' in str(excinfo.value)

    def test_failed_upload_writes_no_file(self, tmp_path, s3_bucket):
        """Test that a feed whose upload fails leaves nothing on disk."""
        store = FeedStore(output_dir=str(tmp_path), bucket='no-such-bucket')

        with pytest.raises(PersistenceError):
            store.write('UFC.ics', ICS)

        assert not (tmp_path / 'UFC.ics').exists()
        assert list(tmp_path.iterdir()) == []

    def test_failed_upload_keeps_previous_feed(self, tmp_path, s3_bucket):
        """Test that the last good feed survives a failed republish."""
        previous = b"BEGIN:VCALENDAR\r\nX-WR-CALNAME:UFC\r\nEND:VCALENDAR\r\n"
        (tmp_path / 'UFC.ics').write_bytes(previous)
        store = FeedStore(output_dir=str(tmp_path), bucket='no-such-bucket')

        with pytest.raises(PersistenceError):
            store.write('UFC.ics', "BEGIN:VCALENDAR\r\nNEW\r\nEND:VCALENDAR\r\n")

        assert (tmp_path / 'UFC.ics').read_bytes() == previous
        assert sorted(p.name for p in tmp_path.iterdir()) == ['UFC.ics']

    def test_failed_replace_cleans_up(self, tmp_path):
        """Test that a failed rename removes the temporary file."""
        store = FeedStore(output_dir=str(tmp_path))

        with patch('storage.feed_store.os.replace', side_effect=OSError('busy')):
            with pytest.raises(PersistenceError):
                store.write('UFC.ics', ICS)

        assert list(tmp_path.iterdir()) == []
