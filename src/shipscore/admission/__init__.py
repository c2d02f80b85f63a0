"""Admission control for incoming scans."""

from .guard import Admission, AdmissionGuard
from .store import InMemoryRequestLogStore, RequestLogStore

__all__ = [
    "Admission",
    "AdmissionGuard",
    "InMemoryRequestLogStore",
    "RequestLogStore",
]
