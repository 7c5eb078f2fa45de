"""Feed storage: local .ics files with optional S3 publishing."""
import logging
import os
import tempfile
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from processor.errors import PersistenceError

logger = logging.getLogger(__name__)


class FeedStore:
    """Writes serialized feeds to disk and, if configured, to S3."""

    CONTENT_TYPE = 'text/calendar; charset=utf-8'

    def __init__(
        self,
        output_dir: str,
        bucket: Optional[str] = None,
        prefix: str = ''
    ):
        """
        Initialize the feed store.

        Args:
            output_dir: Directory feeds are written to
            bucket: Optional S3 bucket feeds are also uploaded to
            prefix: Key prefix for uploaded feeds
        """
        self.output_dir = output_dir
        self.bucket = bucket
        self.prefix = prefix
        self.s3 = boto3.client('s3') if bucket else None
        logger.info(
            f"Initialized FeedStore (output_dir={output_dir}, "
            f"bucket={bucket or '-'})"
        )

    def write(self, filename: str, content: str) -> str:
        """
        Write a feed, replacing any previous copy.

        Args:
            filename: Feed file name (e.g. "UFC.ics")
            content: Serialized iCalendar document

        Returns:
            Location of the published feed (S3 URI if uploaded, else path)

        Raises:
            PersistenceError: If the file cannot be written or uploaded
        """
        path = os.path.join(self.output_dir, filename)
        data = content.encode('utf-8')
        temp_path = None

        try:
            try:
                os.makedirs(self.output_dir, exist_ok=True)
                with tempfile.NamedTemporaryFile(
                    dir=self.output_dir, prefix=f".{filename}.",
                    suffix='.tmp', delete=False
                ) as handle:
                    temp_path = handle.name
                    handle.write(data)
                os.chmod(temp_path, 0o644)
            except OSError as e:
                logger.error(f"Error writing feed to {path}: {e}")
                raise PersistenceError(f"Could not write {path}: {e}") from e

            # The previous feed stays in place until the upload succeeds
            location = self._upload(filename, data) if self.bucket else path

            try:
                os.replace(temp_path, path)
            except OSError as e:
                logger.error(f"Error replacing feed at {path}: {e}")
                raise PersistenceError(f"Could not replace {path}: {e}") from e
            temp_path = None
        finally:
            if temp_path is not None and os.path.exists(temp_path):
                os.unlink(temp_path)

        logger.info(f"Wrote {path} ({len(data)} bytes)")
        return location

    def _upload(self, filename: str, data: bytes) -> str:
        key = f"{self.prefix}{filename}"
        try:
            self.s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=self.CONTENT_TYPE
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error uploading feed to s3://{self.bucket}/{key}: {e}")
            raise PersistenceError(
                f"Could not upload s3://{self.bucket}/{key}: {e}"
            ) from e

        uri = f"s3://{self.bucket}/{key}"
        logger.info(f"Uploaded {uri}")
        return uri
