"""Upload operation used by the sync engine."""

from ..config import EncryptionMode, StorageClass
from ..exceptions import FileReadError
from ..store import RemoteStore
from .scanner import LocalEntry


class SyncOperations:
    """Wraps a remote store with the file handling needed for uploads."""

    def __init__(self, store: RemoteStore):
        """Initialize sync operations.

        Args:
            store: Remote object store
        """
        self.store = store

    def upload_file(
        self,
        local_entry: LocalEntry,
        remote_key: str,
        bucket: str,
        storage_class: StorageClass,
        encryption: EncryptionMode,
    ) -> None:
        """Stream a local file into the remote store.

        Args:
            local_entry: File to upload
            remote_key: Canonical object key
            bucket: Destination bucket
            storage_class: Storage class for the object
            encryption: Server-side encryption mode

        Raises:
            FileReadError: If the file cannot be opened or read
            UploadFailedError: If the store rejects the upload
        """
        try:
            body = open(local_entry.path, "rb")
        except OSError as e:
            raise FileReadError(
                f"Failed to read file {local_entry.relative_path}: {e}"
            ) from e

        with body:
            try:
                self.store.put(bucket, remote_key, body, storage_class, encryption)
            except OSError as e:
                # Raised while the store reads the stream, e.g. file truncated
                raise FileReadError(
                    f"Failed to read file {local_entry.relative_path}: {e}"
                ) from e
