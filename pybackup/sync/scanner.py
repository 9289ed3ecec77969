"""Directory scanning utilities for sync operations."""

import logging
import os
import stat
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..exceptions import DirectoryReadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalEntry:
    """A regular file discovered under the sync root."""

    path: Path
    """Absolute path to the file"""

    relative_path: str
    """Path relative to the sync root (forward slashes)"""

    size: int = 0
    """File size in bytes at the time it was discovered"""


class DirectoryWalker:
    """Walks a local directory tree and yields its regular files.

    The walk is depth-first and pre-order, visiting children in name order.
    It uses an explicit stack, so deep trees cannot exhaust the interpreter's
    recursion limit.

    Entries are classified with ``os.stat`` rather than ``Path.is_file()``
    because the latter reports I/O errors as "not a file". Symlinks are
    followed. A symlinked directory that leads back to one of its own
    ancestors is skipped; any other alias is walked under its own path.

    Examples:
        >>> walker = DirectoryWalker(Path("/home/user/photos"))
        >>> for entry in walker.walk():
        ...     print(entry.relative_path)
    """

    def __init__(self, root: Path):
        """Initialize the walker.

        Args:
            root: Directory to walk. Relative paths are computed against it.
        """
        self.root = Path(root)

    def walk(self) -> Iterator[LocalEntry]:
        """Lazily yield every regular file under the root.

        Unreadable metadata and paths that cannot be expressed relative to
        the root are logged and skipped.

        Yields:
            LocalEntry for each regular file

        Raises:
            DirectoryReadError: If a directory cannot be enumerated
        """
        # Directories on the current descent path, by (st_dev, st_ino)
        ancestors: set[tuple[int, int]] = set()
        # A non-None second item marks leaving that directory
        stack: list[tuple[Path, Optional[tuple[int, int]]]] = [(self.root, None)]

        while stack:
            path, leaving = stack.pop()
            if leaving is not None:
                ancestors.discard(leaving)
                continue

            try:
                metadata = os.stat(path)
            except OSError as e:
                logger.warning("Unable to read the metadata for %s: %s", path, e)
                continue

            if stat.S_ISREG(metadata.st_mode):
                entry = self._make_entry(path, metadata.st_size)
                if entry is not None:
                    logger.debug("Processing %s", path.name)
                    yield entry
                continue

            if not stat.S_ISDIR(metadata.st_mode):
                logger.debug("Ignoring special file %s", path)
                continue

            dir_id = (metadata.st_dev, metadata.st_ino)
            if dir_id in ancestors:
                logger.warning("Skipping directory cycle at %s", path)
                continue

            logger.debug("Diving into new directory: %s", path)
            try:
                with os.scandir(path) as it:
                    names = sorted(child.name for child in it)
            except OSError as e:
                raise DirectoryReadError(path, e) from e

            ancestors.add(dir_id)
            stack.append((path, dir_id))
            # Reverse so the stack pops children in name order
            for name in reversed(names):
                stack.append((path / name, None))

    def _make_entry(self, path: Path, size: int) -> Optional[LocalEntry]:
        """Build a LocalEntry, or return None if path is not under the root."""
        try:
            relative = path.relative_to(self.root).as_posix()
            # Object keys must be valid UTF-8
            relative.encode("utf-8")
        except ValueError as e:
            # UnicodeEncodeError is a ValueError subclass
            logger.error("Failed to parse path %s: %s", path, e)
            return None

        return LocalEntry(path=path, relative_path=relative, size=size)
