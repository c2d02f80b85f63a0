"""Workspace indexing and manifest reading."""

from .index import (
    CONTENT_EXTENSIONS,
    SKIP_DIRS,
    FileIndex,
    FileIndexEntry,
    build_index,
)
from .manifests import PackageManifest, load_package_manifest, read_python_dependencies

__all__ = [
    "CONTENT_EXTENSIONS",
    "SKIP_DIRS",
    "FileIndex",
    "FileIndexEntry",
    "PackageManifest",
    "build_index",
    "load_package_manifest",
    "read_python_dependencies",
]
