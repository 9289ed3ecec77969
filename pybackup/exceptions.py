"""Exceptions raised by pybackup."""


class BackupError(Exception):
    """Base exception for all backup errors."""

    pass


class BackupConfigError(BackupError):
    """Raised when the run configuration is invalid."""

    pass


class InvalidPathError(BackupConfigError):
    """Raised when the sync root cannot be parsed or is not a directory."""

    pass


class InvalidStorageClassError(BackupConfigError):
    """Raised when an unknown storage class is requested."""

    pass


class InvalidEncryptionError(BackupConfigError):
    """Raised when an unknown server-side encryption mode is requested."""

    pass


class ListingFailedError(BackupError):
    """Raised when a page of the remote object listing cannot be fetched."""

    pass


class UploadFailedError(BackupError):
    """Raised when the remote store rejects or fails a put request."""

    pass


class RestoreFailedError(BackupError):
    """Raised when a restore request for an archived object fails."""

    pass


class DirectoryReadError(BackupError):
    """Raised when a directory under the sync root cannot be enumerated."""

    def __init__(self, path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"Unable to read directory {path}: {cause}")


class FileReadError(BackupError):
    """Raised when a local file cannot be opened or read for upload."""

    pass
