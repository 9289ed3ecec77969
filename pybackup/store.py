"""Remote object store access for pybackup.

The sync code only depends on the :class:`RemoteStore` protocol, so tests can
substitute an in-memory store. :class:`S3Store` is the production
implementation on top of boto3.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import DEFAULT_REGION, EncryptionMode, StorageClass
from .exceptions import ListingFailedError, RestoreFailedError, UploadFailedError

logger = logging.getLogger(__name__)


@dataclass
class ListPage:
    """One page of a paginated object listing."""

    keys: list[str] = field(default_factory=list)
    """Object keys on this page"""

    next_cursor: Optional[str] = None
    """Continuation token for the next page, if any"""

    has_more: bool = False
    """Whether the store has more pages after this one"""


class RemoteStore(Protocol):
    """Operations the sync engine needs from an object store."""

    def list_page(self, cursor: Optional[str] = None) -> ListPage:
        """Fetch one page of object keys.

        Raises:
            ListingFailedError: On transport, auth or service errors
        """
        ...

    def put(
        self,
        bucket: str,
        key: str,
        body: BinaryIO,
        storage_class: StorageClass,
        encryption: EncryptionMode,
    ) -> None:
        """Store a single object.

        Raises:
            UploadFailedError: If the object could not be stored
        """
        ...

    def restore(self, key: str, days: int, tier: str) -> None:
        """Request a temporary restore of an archived object.

        Raises:
            RestoreFailedError: If the restore request is rejected
        """
        ...


def _describe_error(error: Exception) -> str:
    """Build a short description of a boto error for messages."""
    if isinstance(error, ClientError):
        details = error.response.get("Error", {})
        code = details.get("Code", "Unknown")
        message = details.get("Message", str(error))
        return f"{code}: {message}"
    return str(error)


class S3Store:
    """S3 implementation of :class:`RemoteStore` backed by boto3."""

    def __init__(
        self,
        bucket: str,
        region: str = DEFAULT_REGION,
        client: Optional[Any] = None,
    ):
        """Initialize the S3 store.

        Credentials are resolved by boto3's default chain (environment,
        shared config, instance profile).

        Args:
            bucket: Bucket to list and restore from
            region: AWS region of the bucket
            client: Optional preconfigured boto3 S3 client
        """
        self.bucket = bucket
        self.region = region
        self._client: Optional[Any] = client

    def _get_client(self) -> Any:
        """Get or create the boto3 client."""
        if self._client is None:
            self._client = boto3.client("s3", region_name=self.region)
        return self._client

    def list_page(self, cursor: Optional[str] = None) -> ListPage:
        """Fetch one page of keys using ListObjectsV2.

        Args:
            cursor: Continuation token from the previous page (None for first)

        Returns:
            ListPage with the keys and pagination state

        Raises:
            ListingFailedError: If the request fails
        """
        params: dict[str, Any] = {"Bucket": self.bucket}
        if cursor is not None:
            params["ContinuationToken"] = cursor

        try:
            response = self._get_client().list_objects_v2(**params)
        except (ClientError, BotoCoreError) as e:
            raise ListingFailedError(
                f"Failed to list objects in bucket '{self.bucket}': "
                f"{_describe_error(e)}"
            ) from e

        keys = [obj["Key"] for obj in response.get("Contents", []) if "Key" in obj]
        return ListPage(
            keys=keys,
            next_cursor=response.get("NextContinuationToken"),
            has_more=bool(response.get("IsTruncated", False)),
        )

    def iter_keys(self) -> Iterator[str]:
        """Iterate over every key in the bucket, page by page.

        Yields:
            Object keys in listing order

        Raises:
            ListingFailedError: If any page request fails
        """
        cursor: Optional[str] = None
        while True:
            page = self.list_page(cursor)
            yield from page.keys
            if not page.has_more:
                return
            cursor = page.next_cursor

    def put(
        self,
        bucket: str,
        key: str,
        body: BinaryIO,
        storage_class: StorageClass,
        encryption: EncryptionMode,
    ) -> None:
        """Upload a single object with PutObject.

        Args:
            bucket: Destination bucket
            key: Canonical object key (forward slashes)
            body: Readable binary stream with the object content
            storage_class: Storage class for the object
            encryption: Server-side encryption mode

        Raises:
            UploadFailedError: If the request fails
        """
        params: dict[str, Any] = {
            "Bucket": bucket,
            "Key": key,
            "Body": body,
            "StorageClass": StorageClass(storage_class).value,
        }
        sse = EncryptionMode(encryption).header_value
        if sse is not None:
            params["ServerSideEncryption"] = sse

        try:
            self._get_client().put_object(**params)
        except (ClientError, BotoCoreError) as e:
            raise UploadFailedError(
                f"S3 upload failed for '{key}': {_describe_error(e)}"
            ) from e

    def restore(self, key: str, days: int, tier: str) -> None:
        """Request a restore of an archived object with RestoreObject.

        Args:
            key: Object key to restore
            days: Number of days the restored copy stays available
            tier: Retrieval tier ("Bulk", "Standard" or "Expedited")

        Raises:
            RestoreFailedError: If the request fails
        """
        try:
            self._get_client().restore_object(
                Bucket=self.bucket,
                Key=key,
                RestoreRequest={
                    "Days": days,
                    "GlacierJobParameters": {"Tier": tier},
                },
            )
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code == "RestoreAlreadyInProgress":
                logger.info("Restore already in progress for %s", key)
                return
            raise RestoreFailedError(
                f"Restore failed for '{key}': {_describe_error(e)}"
            ) from e
        except BotoCoreError as e:
            raise RestoreFailedError(
                f"Restore failed for '{key}': {_describe_error(e)}"
            ) from e
        logger.debug("Requested %s restore of %s for %d days", tier, key, days)
