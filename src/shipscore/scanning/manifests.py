"""Manifest readers. Malformed manifests read as empty, never as errors."""

from __future__ import annotations

from dataclasses import dataclass, field

from .index import FileIndex

PACKAGE_JSON = "package.json"
PYTHON_DEPENDENCY_FILES = ("requirements.txt", "pyproject.toml")


@dataclass(frozen=True)
class PackageManifest:
    """Dependency and script names declared in package.json."""

    present: bool = False
    dependencies: tuple[str, ...] = ()
    dev_dependencies: tuple[str, ...] = ()
    scripts: tuple[str, ...] = field(default_factory=tuple)

    @property
    def all_dependencies(self) -> tuple[str, ...]:
        seen = dict.fromkeys(self.dependencies)
        seen.update(dict.fromkeys(self.dev_dependencies))
        return tuple(seen)

    def declares(self, name: str) -> bool:
        return name in self.dependencies or name in self.dev_dependencies

    def has_script(self, name: str) -> bool:
        return name in self.scripts


def _names(value: object) -> tuple[str, ...]:
    if isinstance(value, dict):
        return tuple(str(k) for k in value)
    return ()


def load_package_manifest(index: FileIndex) -> PackageManifest:
    """Read package.json from the index root."""
    if not index.exists(PACKAGE_JSON):
        return PackageManifest()
    data = index.read_json(PACKAGE_JSON)
    return PackageManifest(
        present=True,
        dependencies=_names(data.get("dependencies")),
        dev_dependencies=_names(data.get("devDependencies")),
        scripts=_names(data.get("scripts")),
    )


def read_python_dependencies(index: FileIndex) -> str:
    """Lowercased text of the Python dependency files that exist ("" if none)."""
    return "\n".join(
        index.read_text(name).lower() for name in PYTHON_DEPENDENCY_FILES if index.exists(name)
    )
