"""Base formatter interface for ShipScore output rendering."""

from abc import ABC, abstractmethod

from ..models import ShipScoreReport


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def render(self, report: ShipScoreReport) -> None:
        """Render the report to stdout."""

    @abstractmethod
    def format(self, report: ShipScoreReport) -> str:
        """Return formatted string representation of the report."""
