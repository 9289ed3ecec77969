"""Per-file outcomes and run summary for sync operations."""

from dataclasses import dataclass, field
from enum import Enum


class UploadOutcome(str, Enum):
    """What happened to a single local file."""

    UPLOADED = "uploaded"
    """File was uploaded (or would be, in a dry run)"""

    SKIPPED = "skipped"
    """A remote object with the same path already exists"""

    WARNING = "warning"
    """File was skipped because reading or uploading it failed"""


@dataclass
class FileResult:
    """Outcome for one local file."""

    relative_path: str
    """Path relative to the sync root"""

    outcome: UploadOutcome
    """Result classification"""

    reason: str = ""
    """Human-readable detail, mostly for warnings"""

    size: int = 0
    """Bytes transferred (or that would be, in a dry run)"""


@dataclass
class SyncReport:
    """Summary of a sync run.

    Only used for reporting; nothing here feeds back into sync decisions.
    Uploads and skips are only counted. Individual results are kept for
    files that ended with a warning.
    """

    existing: int = 0
    """Number of objects found remotely before traversal"""

    dry_run: bool = False
    """Whether uploads were only simulated"""

    uploaded: int = 0
    """Number of files uploaded (or that would be, in a dry run)"""

    skipped: int = 0
    """Number of files skipped because they already exist remotely"""

    uploaded_bytes: int = 0
    """Total size of uploaded files"""

    failures: list[FileResult] = field(default_factory=list)
    """Results for files that ended with a warning, in completion order"""

    def record(self, result: FileResult) -> None:
        """Count a per-file result."""
        if result.outcome == UploadOutcome.UPLOADED:
            self.uploaded += 1
            self.uploaded_bytes += result.size
        elif result.outcome == UploadOutcome.SKIPPED:
            self.skipped += 1
        else:
            self.failures.append(result)

    @property
    def warnings(self) -> int:
        """Number of files skipped because of an error."""
        return len(self.failures)

    @property
    def failed_paths(self) -> list[str]:
        """Relative paths of files that ended with a warning."""
        return [r.relative_path for r in self.failures]

    def to_dict(self) -> dict:
        """Convert report to dictionary for JSON output."""
        return {
            "existing": self.existing,
            "dry_run": self.dry_run,
            "uploads": self.uploaded,
            "uploaded_bytes": self.uploaded_bytes,
            "skips": self.skipped,
            "warnings": self.warnings,
            "failed": [
                {"path": r.relative_path, "reason": r.reason} for r in self.failures
            ],
        }
