"""Sync engine for pybackup - one-way backup of a directory tree."""

from .engine import SyncEngine
from .index import RemoteIndex, RemoteIndexBuilder
from .operations import SyncOperations
from .paths import PathKey, normalize_key, serialize_key
from .report import FileResult, SyncReport, UploadOutcome
from .scanner import DirectoryWalker, LocalEntry

__all__ = [
    "SyncEngine",
    "SyncOperations",
    "RemoteIndex",
    "RemoteIndexBuilder",
    "DirectoryWalker",
    "LocalEntry",
    "PathKey",
    "normalize_key",
    "serialize_key",
    "FileResult",
    "SyncReport",
    "UploadOutcome",
]
