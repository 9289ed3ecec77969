"""Shared fixtures for pybackup tests."""

import tempfile
from pathlib import Path
from typing import Optional

import pytest

from pybackup.exceptions import (
    ListingFailedError,
    RestoreFailedError,
    UploadFailedError,
)
from pybackup.store import ListPage


class FakeStore:
    """In-memory RemoteStore that records every call."""

    def __init__(
        self,
        keys=(),
        page_size: int = 1000,
        fail_puts=(),
        fail_listing_on_page: Optional[int] = None,
        fail_restores=(),
    ):
        self.objects: dict[str, bytes] = {key: b"" for key in keys}
        self.page_size = page_size
        self.fail_puts = set(fail_puts)
        self.fail_listing_on_page = fail_listing_on_page
        self.fail_restores = set(fail_restores)
        self.list_calls: list[Optional[str]] = []
        self.put_calls: list[tuple] = []
        self.restore_calls: list[tuple[str, int, str]] = []

    def list_page(self, cursor: Optional[str] = None) -> ListPage:
        self.list_calls.append(cursor)
        if self.fail_listing_on_page == len(self.list_calls):
            raise ListingFailedError("simulated listing failure")

        keys = sorted(self.objects)
        start = int(cursor) if cursor else 0
        chunk = keys[start : start + self.page_size]
        end = start + len(chunk)
        has_more = end < len(keys)
        return ListPage(
            keys=chunk,
            next_cursor=str(end) if has_more else None,
            has_more=has_more,
        )

    def put(self, bucket, key, body, storage_class, encryption) -> None:
        self.put_calls.append((bucket, key, storage_class, encryption))
        if key in self.fail_puts:
            raise UploadFailedError(f"simulated upload failure for {key}")
        self.objects[key] = body.read()

    def restore(self, key: str, days: int, tier: str) -> None:
        self.restore_calls.append((key, days, tier))
        if key in self.fail_restores:
            raise RestoreFailedError(f"Restore failed for '{key}': InvalidObjectState")

    def iter_keys(self):
        yield from sorted(self.objects)

    @property
    def uploaded_keys(self) -> list[str]:
        return [call[1] for call in self.put_calls]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_store():
    """Create an empty in-memory store."""
    return FakeStore()


def make_tree(root: Path, files: dict[str, str]) -> None:
    """Create files under root from a {relative_path: content} mapping."""
    for relative_path, content in files.items():
        path = root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
