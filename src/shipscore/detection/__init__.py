"""Technology stack detection."""

from .stack import detect_stack

__all__ = ["detect_stack"]
