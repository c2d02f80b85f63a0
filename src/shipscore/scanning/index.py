"""Filesystem Index: one walk of the workspace, queried by every rule.

The index is built once per scan and is read-only afterwards, so category
scorers can query it concurrently. Only indexed paths can be read back,
which keeps symlinks and skipped directories out of every rule.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional, Sequence

from ..logging_config import get_logger

logger = get_logger(__name__)

# Dependency and vendor directories never worth walking.
SKIP_DIRS = frozenset(
    {
        "node_modules",
        "bower_components",
        "jspm_packages",
        "vendor",
        "__pycache__",
        "venv",
        "site-packages",
    }
)

# Extensions searched by content queries unless a caller narrows them.
CONTENT_EXTENSIONS = (".js", ".ts", ".jsx", ".tsx", ".py", ".html", ".json")

DEFAULT_FILE_SCAN_CAP = 50
DEFAULT_MAX_READ_BYTES = 1024 * 1024
DEFAULT_MAX_FILES = 20000


@dataclass(frozen=True)
class FileIndexEntry:
    """One indexed file.

    Attributes:
        path: POSIX path relative to the workspace root
        extension: Suffix of the base name including the dot ("" if none)
        name: Base name
        depth: Number of directories between the root and the file
    """

    path: str
    extension: str
    name: str
    depth: int


class FileIndex:
    """Ordered, immutable view of a workspace."""

    def __init__(
        self,
        root: Path,
        entries: Sequence[FileIndexEntry],
        directories: Iterable[str] = (),
        truncated: bool = False,
        max_read_bytes: int = DEFAULT_MAX_READ_BYTES,
        file_scan_cap: int = DEFAULT_FILE_SCAN_CAP,
    ):
        self.root = Path(root)
        self.entries: tuple[FileIndexEntry, ...] = tuple(entries)
        self.truncated = truncated
        self.max_read_bytes = max_read_bytes
        self.file_scan_cap = file_scan_cap
        self._files = frozenset(e.path for e in self.entries)
        self._directories = frozenset(directories)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[FileIndexEntry]:
        return iter(self.entries)

    # ── Structure queries ──────────────────────────────────────

    def exists(self, relative_path: str) -> bool:
        path = relative_path.strip("/")
        return path in self._files or path in self._directories

    def find(
        self, extensions: Iterable[str], names: Optional[Iterable[str]] = None
    ) -> tuple[str, ...]:
        """
        Paths with an extension in ``extensions``.

        Args:
            extensions: Accepted extensions, with dots (".py")
            names: Optional base-name substrings; any one must match
                (case-sensitive)

        Returns:
            Matching relative paths in index order
        """
        wanted = frozenset(extensions)
        needles = tuple(names) if names else ()
        return tuple(
            e.path
            for e in self.entries
            if e.extension in wanted and (not needles or any(n in e.name for n in needles))
        )

    # ── Content queries ────────────────────────────────────────

    def content_contains(
        self,
        term: str,
        extensions: Optional[Iterable[str]] = None,
        file_scan_cap: Optional[int] = None,
    ) -> bool:
        """Case-insensitive substring search over at most ``file_scan_cap`` files."""
        return self.content_contains_any((term,), extensions, file_scan_cap)

    def content_contains_any(
        self,
        terms: Iterable[str],
        extensions: Optional[Iterable[str]] = None,
        file_scan_cap: Optional[int] = None,
    ) -> bool:
        """True if any term occurs in any of the capped candidate files.

        The cap bounds worst-case cost; a marker that only appears past the
        first ``file_scan_cap`` candidates is missed.
        """
        needles = [t.lower() for t in terms]
        if not needles:
            return False
        for path in self._candidates(extensions, file_scan_cap):
            content = self.read_text(path).lower()
            if any(n in content for n in needles):
                return True
        return False

    def content_contains_all(
        self,
        terms: Iterable[str],
        extensions: Optional[Iterable[str]] = None,
        file_scan_cap: Optional[int] = None,
    ) -> bool:
        """True if every term occurs somewhere in the capped candidate files."""
        remaining = {t.lower() for t in terms}
        if not remaining:
            return False
        for path in self._candidates(extensions, file_scan_cap):
            content = self.read_text(path).lower()
            remaining = {n for n in remaining if n not in content}
            if not remaining:
                return True
        return False

    def _candidates(
        self, extensions: Optional[Iterable[str]], file_scan_cap: Optional[int]
    ) -> tuple[str, ...]:
        cap = self.file_scan_cap if file_scan_cap is None else file_scan_cap
        return self.find(extensions or CONTENT_EXTENSIONS)[:cap]

    # ── Reading ────────────────────────────────────────────────

    def read_text(self, relative_path: str) -> str:
        """Read up to ``max_read_bytes`` of an indexed file; "" if unavailable."""
        path = relative_path.strip("/")
        if path not in self._files:
            return ""
        try:
            with open(self.root / path, "rb") as f:
                data = f.read(self.max_read_bytes)
        except OSError as e:
            logger.debug("Cannot read %s: %s", path, e)
            return ""
        return data.decode("utf-8", errors="replace")

    def read_json(self, relative_path: str) -> dict[str, Any]:
        """Parse an indexed JSON object; {} if missing, malformed or not an object."""
        text = self.read_text(relative_path)
        if not text:
            return {}
        try:
            data = json.loads(text)
        except ValueError as e:
            logger.debug("Malformed JSON in %s: %s", relative_path, e)
            return {}
        return data if isinstance(data, dict) else {}


def _sorted_entries(path: str) -> list[os.DirEntry]:
    try:
        with os.scandir(path) as it:
            return sorted(it, key=lambda e: e.name)
    except OSError as e:
        logger.debug("Skipping unreadable directory %s: %s", path, e)
        return []


def _extension(name: str) -> str:
    return os.path.splitext(name)[1]


def build_index(
    root: Path | str,
    skip_dirs: Iterable[str] = SKIP_DIRS,
    max_files: int = DEFAULT_MAX_FILES,
    max_read_bytes: int = DEFAULT_MAX_READ_BYTES,
    file_scan_cap: int = DEFAULT_FILE_SCAN_CAP,
) -> FileIndex:
    """
    Walk ``root`` once, depth-first, with entries sorted by name.

    Hidden directories and ``skip_dirs`` are not descended into; hidden
    files are indexed. Symlinks are neither followed nor indexed.

    Args:
        root: Workspace root
        skip_dirs: Directory names never descended into
        max_files: Stop after this many files (the index is marked truncated)
        max_read_bytes: Per-file read limit for content queries
        file_scan_cap: Default candidate cap for content queries

    Returns:
        FileIndex over the walked files
    """
    root_path = Path(root)
    skipped = frozenset(skip_dirs)
    entries: list[FileIndexEntry] = []
    directories: list[str] = []
    truncated = False

    # Stack of (directory iterator, relative prefix). Pushing a child
    # directory suspends its parent, giving a pre-order walk.
    stack: list[tuple[Iterator[os.DirEntry], str]] = [
        (iter(_sorted_entries(str(root_path))), "")
    ]

    while stack:
        iterator, prefix = stack[-1]
        entry = next(iterator, None)
        if entry is None:
            stack.pop()
            continue

        rel = f"{prefix}{entry.name}"
        try:
            if entry.is_symlink():
                continue
            if entry.is_dir(follow_symlinks=False):
                if entry.name.startswith(".") or entry.name in skipped:
                    continue
                directories.append(rel)
                stack.append((iter(_sorted_entries(entry.path)), f"{rel}/"))
                continue
            if not entry.is_file(follow_symlinks=False):
                continue
        except OSError:
            continue

        if len(entries) >= max_files:
            truncated = True
            logger.warning("Index stopped at %d files", max_files)
            break

        entries.append(
            FileIndexEntry(
                path=rel,
                extension=_extension(entry.name),
                name=entry.name,
                depth=len(stack) - 1,
            )
        )

    logger.debug("Indexed %d files, %d directories", len(entries), len(directories))
    return FileIndex(
        root_path,
        entries,
        directories=directories,
        truncated=truncated,
        max_read_bytes=max_read_bytes,
        file_scan_cap=file_scan_cap,
    )
