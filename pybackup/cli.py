"""CLI interface for pybackup."""

import logging
from typing import Any, Optional

import click

from . import __version__
from .config import (
    DEFAULT_ENCRYPTION,
    DEFAULT_REGION,
    DEFAULT_RESTORE_DAYS,
    DEFAULT_RESTORE_TIER,
    DEFAULT_STORAGE_CLASS,
    ENV_BUCKET,
    ENV_ENCRYPTION,
    ENV_REGION,
    ENV_STORAGE_CLASS,
    RESTORE_TIERS,
    EncryptionMode,
    StorageClass,
    SyncConfig,
)
from .exceptions import BackupConfigError, BackupError, RestoreFailedError
from .output import OutputFormatter
from .store import S3Store
from .sync import SyncEngine

logger = logging.getLogger(__name__)


def bucket_option(func):
    """Shared --bucket option."""
    return click.option(
        "--bucket",
        "-b",
        envvar=ENV_BUCKET,
        required=True,
        help=f"Bucket to store data in (env: {ENV_BUCKET})",
    )(func)


def region_option(func):
    """Shared --region option."""
    return click.option(
        "--region",
        "-r",
        envvar=ENV_REGION,
        default=DEFAULT_REGION,
        show_default=True,
        help=f"AWS region (env: {ENV_REGION})",
    )(func)


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: Any, quiet: bool, json: bool, verbose: bool) -> None:
    """pybackup - Back up a local directory into S3 archival storage."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    # Configure logging based on verbose/quiet flags
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pybackup").setLevel(logging.DEBUG)
        # botocore request dumps drown out everything else
        logging.getLogger("botocore").setLevel(logging.INFO)
    elif quiet or json:
        logging.basicConfig(level=logging.WARNING)
    else:
        # Per-file skip/upload lines are logged at INFO
        logging.basicConfig(
            level=logging.INFO,
            format="%(levelname)s %(message)s",
        )


@main.command()
@click.argument("path", type=str)
@bucket_option
@region_option
@click.option(
    "--storage-class",
    "-s",
    envvar=ENV_STORAGE_CLASS,
    default=DEFAULT_STORAGE_CLASS,
    show_default=True,
    help="Storage class for uploaded files: "
    + ", ".join(m.value for m in StorageClass),
)
@click.option(
    "--encryption",
    "-e",
    envvar=ENV_ENCRYPTION,
    default=DEFAULT_ENCRYPTION,
    show_default=True,
    help="Server side encryption for uploaded files: "
    + ", ".join(m.value for m in EncryptionMode),
)
@click.option(
    "--dry-run", is_flag=True, help="Show what would be uploaded without uploading"
)
@click.option(
    "--workers",
    "-j",
    type=int,
    default=1,
    help="Number of parallel upload workers (default: 1)",
)
@click.pass_context
def sync(
    ctx: Any,
    path: str,
    bucket: str,
    region: str,
    storage_class: str,
    encryption: str,
    dry_run: bool,
    workers: int,
) -> None:
    """Upload files from PATH that do not exist in the bucket yet.

    PATH: Local directory to back up (``~`` is expanded)

    Files are matched against existing objects by their path relative to
    PATH. Existing objects are never overwritten or deleted.

    Examples:
        pybackup sync ~/Pictures -b my-backups
        pybackup sync ./data -b my-backups -s GLACIER -e aws:kms
        pybackup sync ./data -b my-backups --dry-run
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        config = SyncConfig.from_options(
            bucket=bucket,
            path=path,
            storage_class=storage_class,
            encryption=encryption,
            region=region,
            dry_run=dry_run,
            workers=workers,
        )
    except BackupConfigError as e:
        out.error(str(e))
        ctx.exit(1)
        return  # Unreachable, but helps type checker

    store = S3Store(config.bucket, region=config.region)
    engine = SyncEngine(store, out)

    try:
        report = engine.run(config)
    except KeyboardInterrupt:
        out.warning("\nSync cancelled by user")
        ctx.exit(130)
        return
    except BackupError as e:
        logger.debug("Sync aborted", exc_info=True)
        out.error(f"Failed to sync directories: {e}")
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json(report.to_dict())


@main.command()
@bucket_option
@region_option
@click.option("--prefix", "-p", default="", help="Only list keys with this prefix")
@click.pass_context
def ls(ctx: Any, bucket: str, region: str, prefix: str) -> None:
    """List every object key in the bucket."""
    out: OutputFormatter = ctx.obj["out"]
    store = S3Store(bucket, region=region)

    try:
        keys = [key for key in store.iter_keys() if key.startswith(prefix)]
    except BackupError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json(keys)
        return

    for key in keys:
        out.print(key)
    out.info(f"\n{len(keys)} object(s)")


@main.command()
@click.argument("keys", nargs=-1)
@bucket_option
@region_option
@click.option(
    "--prefix",
    "-p",
    default=None,
    help="Restore every object with this prefix (when no KEYS are given)",
)
@click.option(
    "--days",
    "-d",
    type=int,
    default=DEFAULT_RESTORE_DAYS,
    show_default=True,
    help="Number of days the restored copy stays available",
)
@click.option(
    "--tier",
    "-t",
    type=click.Choice(RESTORE_TIERS),
    default=DEFAULT_RESTORE_TIER,
    show_default=True,
    help="Retrieval tier",
)
@click.pass_context
def restore(
    ctx: Any,
    keys: tuple[str, ...],
    bucket: str,
    region: str,
    prefix: Optional[str],
    days: int,
    tier: str,
) -> None:
    """Request a temporary restore of archived objects.

    KEYS: Object keys to restore. If omitted, every object in the bucket
    (or under --prefix) is restored.

    Examples:
        pybackup restore -b my-backups photos/2021/img_001.jpg
        pybackup restore -b my-backups --prefix photos/2021/ --days 7
        pybackup restore -b my-backups --tier Standard
    """
    out: OutputFormatter = ctx.obj["out"]

    if days < 1:
        out.error("Days must be at least 1")
        ctx.exit(1)
        return
    if keys and prefix is not None:
        out.error("Cannot use --prefix together with explicit KEYS")
        ctx.exit(1)
        return

    store = S3Store(bucket, region=region)

    try:
        targets = list(keys) or [
            key for key in store.iter_keys() if key.startswith(prefix or "")
        ]
    except BackupError as e:
        out.error(str(e))
        ctx.exit(1)
        return

    requested: list[str] = []
    failed: list[dict[str, str]] = []
    try:
        for key in targets:
            out.info(f"Restore {key}")
            try:
                store.restore(key, days=days, tier=tier)
                requested.append(key)
            except RestoreFailedError as e:
                out.error(str(e))
                failed.append({"key": key, "error": str(e)})
    except KeyboardInterrupt:
        out.warning("\nRestore cancelled by user")
        ctx.exit(130)
        return

    if out.json_output:
        out.output_json({"requested": requested, "failed": failed})
    else:
        summary = [("Requested", f"{len(requested)} object(s)")]
        if failed:
            summary.append(("Failed", f"{len(failed)} object(s)"))
        summary.append(("Available for", f"{days} day(s), {tier} tier"))
        out.print_summary("Restore Complete", summary)

    if failed:
        ctx.exit(1)


if __name__ == "__main__":
    main()
