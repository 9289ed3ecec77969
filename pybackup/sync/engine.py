"""Core sync engine for backing up a directory into a remote store."""

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Optional

from rich.progress import Progress, SpinnerColumn, TextColumn

from ..config import SyncConfig
from ..exceptions import FileReadError, UploadFailedError
from ..output import OutputFormatter
from ..store import RemoteStore
from .index import RemoteIndex, RemoteIndexBuilder
from .operations import SyncOperations
from .paths import PathKey, normalize_key, serialize_key
from .report import FileResult, SyncReport, UploadOutcome
from .scanner import DirectoryWalker, LocalEntry

logger = logging.getLogger(__name__)

# Pending uploads per worker before traversal waits for one to finish
_QUEUE_FACTOR = 4


class SyncEngine:
    """Core sync engine that uploads local files missing from the remote."""

    def __init__(
        self,
        store: RemoteStore,
        output: Optional[OutputFormatter] = None,
    ):
        """Initialize sync engine.

        Args:
            store: Remote object store to list and upload into
            output: Output formatter for displaying progress/status
        """
        self.store = store
        self.output = output or OutputFormatter()
        self.operations = SyncOperations(store)

    def run(self, config: SyncConfig) -> SyncReport:
        """Build the remote index and sync config.root into it.

        Args:
            config: Run configuration

        Returns:
            SyncReport for the run

        Raises:
            ListingFailedError: If the remote listing fails
            DirectoryReadError: If a local directory cannot be enumerated

        Examples:
            >>> engine = SyncEngine(S3Store("my-bucket"))
            >>> report = engine.run(config)
            >>> print(f"Uploaded {report.uploaded} files")
        """
        if not self.output.quiet:
            self.output.info(f"Syncing: {config.root} -> s3://{config.bucket}")
            self.output.info(
                f"Storage class: {config.storage_class.value}, "
                f"encryption: {config.encryption.value}"
            )
            if config.dry_run:
                self.output.info("Dry run: No changes will be made")
            self.output.print("")

        index = self.scan_remote()
        report = self.sync(config, index, DirectoryWalker(config.root))

        if not self.output.quiet:
            self._display_summary(report)

        return report

    def scan_remote(self) -> RemoteIndex:
        """List all remote objects into a new index.

        Raises:
            ListingFailedError: If any page of the listing fails
        """
        builder = RemoteIndexBuilder()
        if self.output.quiet or self.output.json_output:
            index = builder.build(self.store)
        else:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                transient=True,
                console=self.output.err_console,
            ) as progress:
                progress.add_task("Listing remote objects...", total=None)
                index = builder.build(self.store)

        logger.info("Found %d objects", len(index))
        return index

    def sync(
        self,
        config: SyncConfig,
        index: RemoteIndex,
        walker: DirectoryWalker,
    ) -> SyncReport:
        """Upload every walked file whose path is not in the index.

        Per-file failures are recorded as warnings and never stop the run.
        The index is extended with each accepted key before its upload is
        attempted, so a failed upload is not retried within the same run.

        Args:
            config: Run configuration
            index: Remote index, extended in place
            walker: Source of local files

        Returns:
            SyncReport with one result per walked file

        Raises:
            DirectoryReadError: If the walker cannot enumerate a directory
        """
        start_time = time.time()
        report = SyncReport(existing=len(index), dry_run=config.dry_run)

        if config.workers > 1:
            self._sync_parallel(config, index, walker, report)
        else:
            for entry in walker.walk():
                key = self._claim(entry, index, report, config.dry_run)
                if key is not None:
                    report.record(self._upload_entry(entry, key, config))

        logger.debug(
            "Sync took %.2fs: %d uploaded, %d skipped, %d warnings",
            time.time() - start_time,
            report.uploaded,
            report.skipped,
            report.warnings,
        )
        return report

    def _claim(
        self,
        entry: LocalEntry,
        index: RemoteIndex,
        report: SyncReport,
        dry_run: bool = False,
    ) -> Optional[PathKey]:
        """Decide whether entry needs uploading.

        Returns:
            The entry's key if it was newly claimed, None if it already exists
        """
        key = normalize_key(entry.relative_path)
        if not index.claim(key):
            logger.info("Skipping existing file: %s", entry.relative_path)
            report.record(FileResult(entry.relative_path, UploadOutcome.SKIPPED))
            return None

        if dry_run:
            logger.info("Would upload new file: %s", entry.relative_path)
        else:
            logger.info("Uploading new file: %s", entry.relative_path)
        return key

    def _upload_entry(
        self, entry: LocalEntry, key: PathKey, config: SyncConfig
    ) -> FileResult:
        """Upload a claimed entry, containing any per-file failure."""
        if config.dry_run:
            return FileResult(
                entry.relative_path, UploadOutcome.UPLOADED, "dry run", entry.size
            )

        action_start = time.time()
        try:
            self.operations.upload_file(
                local_entry=entry,
                remote_key=serialize_key(key),
                bucket=config.bucket,
                storage_class=config.storage_class,
                encryption=config.encryption,
            )
        except FileReadError as e:
            logger.warning("%s", e)
            return FileResult(entry.relative_path, UploadOutcome.WARNING, str(e))
        except UploadFailedError as e:
            logger.warning("Failed to upload %s: %s", entry.relative_path, e)
            return FileResult(entry.relative_path, UploadOutcome.WARNING, str(e))

        logger.debug(
            "Upload of %s (%s) took %.2fs",
            entry.relative_path,
            OutputFormatter.format_size(entry.size),
            time.time() - action_start,
        )
        return FileResult(
            entry.relative_path, UploadOutcome.UPLOADED, size=entry.size
        )

    def _sync_parallel(
        self,
        config: SyncConfig,
        index: RemoteIndex,
        walker: DirectoryWalker,
        report: SyncReport,
    ) -> None:
        """Walk on this thread and upload claimed files with a worker pool.

        Decisions still happen in traversal order; only the uploads run
        concurrently. If the walk fails, uploads already submitted finish
        before the error propagates.
        """
        logger.debug("Uploading with %d workers", config.workers)
        max_pending = config.workers * _QUEUE_FACTOR
        pending: set[Future] = set()

        def collect(done: set[Future]) -> None:
            for future in done:
                report.record(future.result())

        with ThreadPoolExecutor(max_workers=config.workers) as executor:
            for entry in walker.walk():
                key = self._claim(entry, index, report, config.dry_run)
                if key is None:
                    continue

                pending.add(executor.submit(self._upload_entry, entry, key, config))
                if len(pending) >= max_pending:
                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    collect(done)

            done, pending = wait(pending)
            collect(done)

    def _display_summary(self, report: SyncReport) -> None:
        """Display sync summary.

        Args:
            report: Report for the finished run
        """
        self.output.print("")
        if report.dry_run:
            self.output.success("Dry run complete!")
        else:
            self.output.success("All directories synced")

        upload_label = "Would upload" if report.dry_run else "Uploaded"
        items = [
            ("Existing objects", str(report.existing)),
            (upload_label, str(report.uploaded)),
            ("Data", OutputFormatter.format_size(report.uploaded_bytes)),
            ("Skipped", str(report.skipped)),
        ]
        if report.warnings > 0:
            items.append(("Warnings", str(report.warnings)))
        self.output.print_summary("Sync summary", items)

        if report.warnings > 0:
            self.output.warning(
                f"{report.warnings} file(s) could not be uploaded and will be "
                "retried on the next run:"
            )
            rows = [
                {"path": r.relative_path, "reason": r.reason} for r in report.failures
            ]
            self.output.output_table(
                rows, ["path", "reason"], {"path": "Path", "reason": "Reason"}
            )
