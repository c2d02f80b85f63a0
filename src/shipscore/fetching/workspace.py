"""
Scan workspaces: provisioning, size accounting and reclamation.

A workspace is one uniquely named directory that lives for exactly one
scan. It is deleted when the scan ends, however it ends.
"""

from __future__ import annotations

import os
import secrets
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..logging_config import get_logger

logger = get_logger(__name__)

WORKSPACE_PREFIX = "shipscore-scan-"


@dataclass(frozen=True)
class TreeSize:
    """Result of a bounded size walk.

    ``total_bytes`` is exact when ``exceeded`` is False; otherwise it is
    the running total at the moment the ceiling was crossed.
    """

    total_bytes: int
    exceeded: bool


def measure_tree(root: Path, ceiling_bytes: int) -> TreeSize:
    """
    Sum file sizes under ``root``, stopping as soon as ``ceiling_bytes`` is exceeded.

    Symlinks are never followed; their own lstat size is counted. Entries
    that vanish or cannot be stat'ed are ignored.

    Args:
        root: Directory to measure
        ceiling_bytes: Stop once the running total is greater than this

    Returns:
        TreeSize with the running total and whether the ceiling was crossed
    """
    total = 0
    pending = [str(root)]

    while pending:
        current = pending.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            pending.append(entry.path)
                            continue
                        total += entry.stat(follow_symlinks=False).st_size
                    except OSError:
                        continue
                    if total > ceiling_bytes:
                        return TreeSize(total_bytes=total, exceeded=True)
        except OSError as e:
            logger.debug("Cannot list %s: %s", current, e)

    return TreeSize(total_bytes=total, exceeded=False)


def reclaim_workspace(path: Union[str, Path, None]) -> bool:
    """
    Recursively delete a workspace tree. Never raises.

    Args:
        path: Workspace root (None and missing paths are no-ops)

    Returns:
        True if nothing remains at ``path`` afterwards
    """
    if path is None:
        return True
    target = Path(path)
    try:
        if target.exists() or target.is_symlink():
            shutil.rmtree(target)
            logger.debug("Reclaimed workspace %s", target)
        return True
    except Exception as e:
        logger.warning("Failed to reclaim workspace %s: %s", target, e)
        return not target.exists()


class Workspace:
    """An exclusively owned scan directory.

    Usage:
        with Workspace.provision() as workspace:
            ...  # populate and read workspace.root
        # deleted here, success or failure
    """

    def __init__(self, root: Path, scan_id: str):
        self.root = root
        self.scan_id = scan_id
        self._reclaimed = False

    @classmethod
    def provision(cls, base_dir: Optional[Union[str, Path]] = None) -> "Workspace":
        """
        Create a fresh directory with a 128-bit random component in its name.

        ``tempfile.mkdtemp`` creates it atomically with mode 0700 and adds
        its own random suffix, so two scans can never share a path.
        """
        scan_id = secrets.token_hex(16)
        if base_dir is not None:
            Path(base_dir).mkdir(parents=True, exist_ok=True)
        root = Path(tempfile.mkdtemp(prefix=f"{WORKSPACE_PREFIX}{scan_id}-", dir=base_dir))
        logger.debug("Provisioned workspace %s", root)
        return cls(root=root, scan_id=scan_id)

    @property
    def reclaimed(self) -> bool:
        return self._reclaimed

    def reclaim(self) -> bool:
        """Delete the workspace. Safe to call any number of times."""
        if self._reclaimed:
            return True
        self._reclaimed = reclaim_workspace(self.root)
        return self._reclaimed

    def __enter__(self) -> "Workspace":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.reclaim()

    def __repr__(self) -> str:
        return f"Workspace(scan_id={self.scan_id!r}, reclaimed={self._reclaimed})"
