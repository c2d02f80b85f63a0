"""Fetching untrusted repositories into bounded workspaces."""

from .capability import FetchCapability
from .fetcher import SourceFetcher
from .git import GitCloneCapability
from .reference import RepositoryReference, is_valid_reference, parse_reference
from .workspace import TreeSize, Workspace, measure_tree, reclaim_workspace

__all__ = [
    "FetchCapability",
    "GitCloneCapability",
    "RepositoryReference",
    "SourceFetcher",
    "TreeSize",
    "Workspace",
    "is_valid_reference",
    "measure_tree",
    "parse_reference",
    "reclaim_workspace",
]
