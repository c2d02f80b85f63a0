"""The source-fetch capability consumed by the Source Fetcher."""

from abc import ABC, abstractmethod
from pathlib import Path

from .reference import RepositoryReference


class FetchCapability(ABC):
    """Materializes a validated reference as a local directory tree.

    Implementations must honour ``timeout_seconds`` themselves (raising
    ScanTimeoutError) and raise UnreachableError when the source cannot be
    retrieved. ``destination`` already exists and is empty.
    """

    name: str = "abstract"

    @abstractmethod
    def fetch(self, reference: RepositoryReference, destination: Path, timeout_seconds: float) -> None:
        """Populate ``destination`` with the repository contents."""
