"""Tests for SyncReport."""

from pybackup.sync.report import FileResult, SyncReport, UploadOutcome


class TestSyncReport:
    """Test result counting and serialization."""

    def test_counts_without_keeping_successful_results(self):
        """Uploads and skips are counted; only warnings are stored."""
        report = SyncReport(existing=5)
        for i in range(1000):
            report.record(FileResult(f"old{i}.txt", UploadOutcome.SKIPPED))
        report.record(FileResult("new.txt", UploadOutcome.UPLOADED, size=10))
        report.record(FileResult("big.bin", UploadOutcome.UPLOADED, size=2048))
        report.record(FileResult("bad.txt", UploadOutcome.WARNING, "denied"))

        assert report.skipped == 1000
        assert report.uploaded == 2
        assert report.uploaded_bytes == 2058
        assert report.warnings == 1
        assert report.failures == [
            FileResult("bad.txt", UploadOutcome.WARNING, "denied")
        ]

    def test_failed_paths_keep_completion_order(self):
        report = SyncReport()
        report.record(FileResult("z.txt", UploadOutcome.WARNING, "e1"))
        report.record(FileResult("a.txt", UploadOutcome.UPLOADED))
        report.record(FileResult("m.txt", UploadOutcome.WARNING, "e2"))

        assert report.failed_paths == ["z.txt", "m.txt"]

    def test_to_dict(self):
        report = SyncReport(existing=3, dry_run=True)
        report.record(FileResult("a.txt", UploadOutcome.UPLOADED, "dry run", 4))
        report.record(FileResult("b.txt", UploadOutcome.SKIPPED))
        report.record(FileResult("c.txt", UploadOutcome.WARNING, "boom"))

        assert report.to_dict() == {
            "existing": 3,
            "dry_run": True,
            "uploads": 1,
            "uploaded_bytes": 4,
            "skips": 1,
            "warnings": 1,
            "failed": [{"path": "c.txt", "reason": "boom"}],
        }
