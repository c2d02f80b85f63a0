"""
ShipScore - Repository production-readiness scanner

Fetches a public GitHub repository into an isolated, bounded workspace,
detects its technology stack, scores seven readiness categories and
combines them into a single 0-100 Ship Score.
"""

__version__ = "0.1.0"

from .api import scan
from .exceptions import ScanError, ShipScoreError
from .models import Category, CategoryScore, ShipScoreReport, StackDetection, Status
from .pipeline import ScanPipeline, ScanService

__all__ = [
    "scan",  # Main entry point
    "ScanPipeline",  # Long-lived hosts (shared admission state)
    "ScanService",
    "ShipScoreReport",
    "CategoryScore",
    "StackDetection",
    "Category",
    "Status",
    "ScanError",
    "ShipScoreError",
]
