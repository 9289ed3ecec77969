"""pybackup - back up a local directory tree into S3 archival storage."""

from .config import EncryptionMode, StorageClass, SyncConfig
from .exceptions import (
    BackupConfigError,
    BackupError,
    DirectoryReadError,
    FileReadError,
    InvalidEncryptionError,
    InvalidPathError,
    InvalidStorageClassError,
    ListingFailedError,
    RestoreFailedError,
    UploadFailedError,
)
from .store import ListPage, RemoteStore, S3Store

__version__ = "0.1.0"

__all__ = [
    "S3Store",
    "RemoteStore",
    "ListPage",
    "SyncConfig",
    "StorageClass",
    "EncryptionMode",
    "BackupError",
    "BackupConfigError",
    "DirectoryReadError",
    "FileReadError",
    "InvalidEncryptionError",
    "InvalidPathError",
    "InvalidStorageClassError",
    "ListingFailedError",
    "RestoreFailedError",
    "UploadFailedError",
]
