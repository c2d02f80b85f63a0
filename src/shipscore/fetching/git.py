"""Shallow git clone via subprocess."""

import os
import subprocess
from pathlib import Path

from ..exceptions import InternalFailureError, ScanTimeoutError, UnreachableError
from ..logging_config import get_logger
from .capability import FetchCapability
from .reference import RepositoryReference

logger = get_logger(__name__)

# Cap on captured stderr kept for logs.
_MAX_STDERR_CHARS = 2000


class GitCloneCapability(FetchCapability):
    """Fetch with ``git clone --depth 1``.

    The command is an argv list (no shell) and the URL comes after ``--``.
    Credential prompts are disabled so a private repository fails fast
    instead of blocking on stdin.
    """

    name = "git"

    def __init__(self, git_executable: str = "git"):
        self.git_executable = git_executable

    def build_command(self, reference: RepositoryReference, destination: Path) -> list[str]:
        return [
            self.git_executable,
            "clone",
            "--depth",
            "1",
            "--quiet",
            "--no-tags",
            "--",
            reference.url,
            str(destination),
        ]

    def fetch(self, reference: RepositoryReference, destination: Path, timeout_seconds: float) -> None:
        cmd = self.build_command(reference, destination)
        env = dict(os.environ)
        env["GIT_TERMINAL_PROMPT"] = "0"
        env["GIT_ASKPASS"] = "echo"

        logger.info("Cloning %s (timeout %.0fs)", reference.slug, timeout_seconds)
        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                encoding="utf-8",
                errors="replace",
                env=env,
            )
        except FileNotFoundError:
            raise InternalFailureError(
                "git executable not available", details={"executable": self.git_executable}
            )

        try:
            _, stderr = proc.communicate(timeout=timeout_seconds)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.communicate()
            logger.warning("Clone of %s exceeded %.0fs, killed", reference.slug, timeout_seconds)
            raise ScanTimeoutError("clone", timeout_seconds)

        if proc.returncode != 0:
            stderr = (stderr or "").strip()[:_MAX_STDERR_CHARS]
            logger.warning("git clone failed for %s: %s", reference.slug, stderr)
            raise UnreachableError(
                "git clone failed",
                details={"repository": reference.slug, "returncode": str(proc.returncode)},
            )
