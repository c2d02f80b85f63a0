"""JSON formatter for ShipScore."""

from .base import BaseFormatter
from ..models import ShipScoreReport


class JsonFormatter(BaseFormatter):
    """Render the report in its wire shape."""

    def render(self, report: ShipScoreReport) -> None:
        print(self.format(report))

    def format(self, report: ShipScoreReport) -> str:
        return report.to_json(indent=2)
