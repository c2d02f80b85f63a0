"""Source Fetcher: reference -> bounded, isolated workspace."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from ..exceptions import TooLargeError
from ..logging_config import get_logger
from .capability import FetchCapability
from .git import GitCloneCapability
from .reference import RepositoryReference, parse_reference
from .workspace import Workspace, measure_tree

logger = get_logger(__name__)

DEFAULT_CLONE_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_WORKSPACE_BYTES = 100 * 1024 * 1024


class SourceFetcher:
    """Validate, provision, fetch, then enforce the byte ceiling.

    On any failure after the workspace exists, it is reclaimed before the
    exception propagates, so a failed fetch leaves nothing on disk.
    """

    def __init__(
        self,
        capability: Optional[FetchCapability] = None,
        clone_timeout_seconds: float = DEFAULT_CLONE_TIMEOUT_SECONDS,
        max_workspace_bytes: int = DEFAULT_MAX_WORKSPACE_BYTES,
        workspace_dir: Optional[Union[str, Path]] = None,
    ):
        self.capability = capability or GitCloneCapability()
        self.clone_timeout_seconds = clone_timeout_seconds
        self.max_workspace_bytes = max_workspace_bytes
        self.workspace_dir = workspace_dir

    def fetch(
        self,
        reference: Union[str, RepositoryReference],
        timeout_seconds: Optional[float] = None,
    ) -> Workspace:
        """
        Materialize ``reference`` in a new workspace.

        Args:
            reference: Raw URL or an already validated reference
            timeout_seconds: Tighter ceiling than the configured clone
                timeout (e.g. time left on the scan deadline)

        Returns:
            Workspace owned by the caller, who must reclaim it

        Raises:
            InvalidReferenceError: Before any directory or process is created
            UnreachableError: The capability could not retrieve the source
            ScanTimeoutError: The fetch exceeded its ceiling
            TooLargeError: The workspace exceeded the byte ceiling
        """
        if not isinstance(reference, RepositoryReference):
            reference = parse_reference(reference)

        timeout = self.clone_timeout_seconds
        if timeout_seconds is not None:
            timeout = min(timeout, timeout_seconds)

        workspace = Workspace.provision(self.workspace_dir)
        try:
            self.capability.fetch(reference, workspace.root, timeout)

            size = measure_tree(workspace.root, self.max_workspace_bytes)
            if size.exceeded:
                logger.warning(
                    "Workspace for %s exceeded %d bytes", reference.slug, self.max_workspace_bytes
                )
                raise TooLargeError(self.max_workspace_bytes)

            logger.info("Fetched %s (%d bytes)", reference.slug, size.total_bytes)
            return workspace
        except BaseException:
            workspace.reclaim()
            raise
