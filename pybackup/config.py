"""Run configuration for pybackup.

Values normally come from the command line (see :mod:`pybackup.cli`), with
environment variables as fallbacks. Everything here is validated before any
remote or local I/O happens.
"""

import os
import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .exceptions import (
    BackupConfigError,
    InvalidEncryptionError,
    InvalidPathError,
    InvalidStorageClassError,
)

# =============================================================================
# Defaults and environment variables
# =============================================================================

DEFAULT_REGION: str = "eu-west-2"
DEFAULT_STORAGE_CLASS: str = "DEEP_ARCHIVE"
DEFAULT_ENCRYPTION: str = "AES256"

# Restore requests (glacier / deep archive)
DEFAULT_RESTORE_DAYS: int = 14
DEFAULT_RESTORE_TIER: str = "Bulk"
RESTORE_TIERS: tuple[str, ...] = ("Bulk", "Standard", "Expedited")

ENV_BUCKET = "PYBACKUP_BUCKET"
ENV_REGION = "AWS_REGION"
ENV_STORAGE_CLASS = "PYBACKUP_STORAGE_CLASS"
ENV_ENCRYPTION = "PYBACKUP_ENCRYPTION"


class StorageClass(str, Enum):
    """S3 storage classes accepted for uploaded objects."""

    DEEP_ARCHIVE = "DEEP_ARCHIVE"
    GLACIER = "GLACIER"
    GLACIER_IR = "GLACIER_IR"
    INTELLIGENT_TIERING = "INTELLIGENT_TIERING"
    ONEZONE_IA = "ONEZONE_IA"
    OUTPOSTS = "OUTPOSTS"
    REDUCED_REDUNDANCY = "REDUCED_REDUNDANCY"
    STANDARD = "STANDARD"
    STANDARD_IA = "STANDARD_IA"

    @classmethod
    def parse(cls, value: str) -> "StorageClass":
        """Parse a storage class name.

        Args:
            value: Storage class identifier (e.g. "DEEP_ARCHIVE")

        Returns:
            Matching StorageClass

        Raises:
            InvalidStorageClassError: If value is not a known storage class
        """
        try:
            return cls(value)
        except ValueError as e:
            valid = ", ".join(m.value for m in cls)
            raise InvalidStorageClassError(
                f"Invalid storage class '{value}'. Valid values: {valid}"
            ) from e


class EncryptionMode(str, Enum):
    """Server-side encryption applied to uploaded objects."""

    NONE = "NONE"
    """No server-side encryption header is sent"""

    AES256 = "AES256"
    """S3-managed keys (SSE-S3)"""

    AWS_KMS = "aws:kms"
    """KMS-managed keys (SSE-KMS)"""

    @classmethod
    def parse(cls, value: str) -> "EncryptionMode":
        """Parse an encryption mode name.

        Args:
            value: Encryption identifier ("AES256", "aws:kms" or "NONE")

        Returns:
            Matching EncryptionMode

        Raises:
            InvalidEncryptionError: If value is not a known encryption mode
        """
        try:
            return cls(value)
        except ValueError as e:
            valid = ", ".join(m.value for m in cls)
            raise InvalidEncryptionError(
                f"Invalid server side encryption '{value}'. Valid values: {valid}"
            ) from e

    @property
    def header_value(self) -> Optional[str]:
        """Value for the ServerSideEncryption request parameter."""
        if self is EncryptionMode.NONE:
            return None
        return self.value


def expand_path(raw: Union[str, os.PathLike]) -> Path:
    """Expand a user supplied root path.

    Args:
        raw: Path as given on the command line, may start with ``~``

    Returns:
        Absolute path with the home directory expanded

    Raises:
        InvalidPathError: If the path is empty or cannot be expanded
    """
    try:
        text = os.fspath(raw)
    except TypeError as e:
        raise InvalidPathError(f"Could not parse path: {raw!r}") from e

    if not text:
        raise InvalidPathError("Could not parse path: empty path")

    try:
        return Path(text).expanduser().absolute()
    except RuntimeError as e:
        # expanduser raises when the home directory cannot be determined
        raise InvalidPathError(f"Could not expand path {text}: {e}") from e


@dataclass(frozen=True)
class SyncConfig:
    """Immutable parameters for a single backup run."""

    bucket: str
    """Destination bucket name"""

    root: Path
    """Local directory to back up"""

    storage_class: StorageClass = StorageClass.DEEP_ARCHIVE
    """Storage class for uploaded objects"""

    encryption: EncryptionMode = EncryptionMode.AES256
    """Server-side encryption for uploaded objects"""

    region: str = DEFAULT_REGION
    """AWS region of the bucket"""

    dry_run: bool = False
    """Decide and report only, never upload"""

    workers: int = 1
    """Number of parallel upload workers"""

    @classmethod
    def from_options(
        cls,
        bucket: str,
        path: Union[str, os.PathLike],
        storage_class: str = DEFAULT_STORAGE_CLASS,
        encryption: str = DEFAULT_ENCRYPTION,
        region: str = DEFAULT_REGION,
        dry_run: bool = False,
        workers: int = 1,
    ) -> "SyncConfig":
        """Build a validated config from raw option values.

        Raises:
            BackupConfigError: If any option is invalid
        """
        parsed_class = StorageClass.parse(storage_class)
        parsed_encryption = EncryptionMode.parse(encryption)
        if not bucket:
            raise BackupConfigError("Bucket name is required")
        if workers < 1:
            raise BackupConfigError("Workers must be at least 1")

        root = expand_path(path)
        try:
            metadata = os.stat(root)
        except OSError as e:
            raise InvalidPathError(f"Unable to read path {root}: {e}") from e
        if not stat.S_ISDIR(metadata.st_mode):
            raise InvalidPathError(f"Path is not a directory: {root}")

        return cls(
            bucket=bucket,
            root=root,
            storage_class=parsed_class,
            encryption=parsed_encryption,
            region=region,
            dry_run=dry_run,
            workers=workers,
        )
