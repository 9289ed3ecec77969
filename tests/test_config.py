"""Tests for run configuration parsing."""

from pathlib import Path
from unittest.mock import patch

import pytest

from pybackup.config import (
    DEFAULT_REGION,
    EncryptionMode,
    StorageClass,
    SyncConfig,
    expand_path,
)
from pybackup.exceptions import (
    BackupConfigError,
    InvalidEncryptionError,
    InvalidPathError,
    InvalidStorageClassError,
)


class TestStorageClass:
    """Tests for StorageClass parsing."""

    @pytest.mark.parametrize(
        "value",
        ["DEEP_ARCHIVE", "GLACIER", "GLACIER_IR", "STANDARD_IA", "OUTPOSTS"],
    )
    def test_parse_valid(self, value):
        assert StorageClass.parse(value).value == value

    def test_parse_invalid_lists_valid_values(self):
        with pytest.raises(InvalidStorageClassError) as exc_info:
            StorageClass.parse("deep_archive")

        message = str(exc_info.value)
        assert "Invalid storage class 'deep_archive'" in message
        assert "DEEP_ARCHIVE" in message
        assert "REDUCED_REDUNDANCY" in message

    def test_invalid_is_a_config_error(self):
        with pytest.raises(BackupConfigError):
            StorageClass.parse("COLD")


class TestEncryptionMode:
    """Tests for EncryptionMode parsing."""

    def test_parse_aes256(self):
        assert EncryptionMode.parse("AES256") is EncryptionMode.AES256

    def test_parse_kms(self):
        assert EncryptionMode.parse("aws:kms") is EncryptionMode.AWS_KMS

    def test_parse_invalid(self):
        with pytest.raises(InvalidEncryptionError, match="Invalid server side"):
            EncryptionMode.parse("rot13")

    def test_header_value(self):
        """NONE sends no header, the others send their value."""
        assert EncryptionMode.NONE.header_value is None
        assert EncryptionMode.AES256.header_value == "AES256"
        assert EncryptionMode.AWS_KMS.header_value == "aws:kms"


class TestExpandPath:
    """Tests for expand_path."""

    def test_expands_home(self):
        with patch.dict("os.environ", {"HOME": "/home/tester"}):
            assert expand_path("~/Pictures") == Path("/home/tester/Pictures")

    def test_relative_path_becomes_absolute(self):
        assert expand_path("data").is_absolute()

    def test_empty_path_is_rejected(self):
        with pytest.raises(InvalidPathError):
            expand_path("")

    def test_non_path_is_rejected(self):
        with pytest.raises(InvalidPathError):
            expand_path(42)

    def test_unexpandable_home_is_rejected(self):
        with patch.object(Path, "expanduser", side_effect=RuntimeError("no home")):
            with pytest.raises(InvalidPathError, match="Could not expand"):
                expand_path("~nobody-here/data")


class TestSyncConfig:
    """Tests for SyncConfig.from_options."""

    def test_defaults(self, temp_dir):
        config = SyncConfig.from_options(bucket="bucket", path=str(temp_dir))

        assert config.bucket == "bucket"
        assert config.root == temp_dir
        assert config.storage_class is StorageClass.DEEP_ARCHIVE
        assert config.encryption is EncryptionMode.AES256
        assert config.region == DEFAULT_REGION
        assert config.dry_run is False
        assert config.workers == 1

    def test_all_options(self, temp_dir):
        config = SyncConfig.from_options(
            bucket="bucket",
            path=temp_dir,
            storage_class="GLACIER_IR",
            encryption="NONE",
            region="us-east-1",
            dry_run=True,
            workers=8,
        )

        assert config.storage_class is StorageClass.GLACIER_IR
        assert config.encryption is EncryptionMode.NONE
        assert config.region == "us-east-1"
        assert config.dry_run is True
        assert config.workers == 8

    def test_config_is_frozen(self, temp_dir):
        config = SyncConfig(bucket="bucket", root=temp_dir)

        with pytest.raises(AttributeError):
            config.bucket = "other"

    def test_missing_directory(self, temp_dir):
        with pytest.raises(InvalidPathError, match="No such file or directory"):
            SyncConfig.from_options(bucket="bucket", path=temp_dir / "missing")

    def test_unreadable_path_reports_cause(self, temp_dir):
        """A stat failure is reported as such, not as "not a directory"."""
        denied = PermissionError(13, "Permission denied", str(temp_dir))

        with patch("pybackup.config.os.stat", side_effect=denied):
            with pytest.raises(InvalidPathError) as exc_info:
                SyncConfig.from_options(bucket="bucket", path=temp_dir)

        message = str(exc_info.value)
        assert "Permission denied" in message
        assert "not a directory" not in message
        assert exc_info.value.__cause__ is denied

    def test_file_is_not_a_directory(self, temp_dir):
        file_path = temp_dir / "file.txt"
        file_path.write_text("data")

        with pytest.raises(InvalidPathError):
            SyncConfig.from_options(bucket="bucket", path=file_path)

    def test_empty_bucket(self, temp_dir):
        with pytest.raises(BackupConfigError, match="Bucket name is required"):
            SyncConfig.from_options(bucket="", path=temp_dir)

    def test_invalid_workers(self, temp_dir):
        with pytest.raises(BackupConfigError, match="Workers"):
            SyncConfig.from_options(bucket="bucket", path=temp_dir, workers=0)

    def test_invalid_storage_class_checked_before_path(self, temp_dir):
        """Option values are validated before touching the filesystem."""
        with pytest.raises(InvalidStorageClassError):
            SyncConfig.from_options(
                bucket="bucket",
                path=temp_dir / "missing",
                storage_class="COLD",
            )
