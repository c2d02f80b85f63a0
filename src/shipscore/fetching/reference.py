"""
Repository reference validation.

The reference ends up in an external command line, so it is checked
against a strict allow-list before anything else happens.
"""

import re
from dataclasses import dataclass

from ..exceptions import InvalidReferenceError

# host + owner + name, optional trailing slash, nothing else
REFERENCE_PATTERN = re.compile(
    r"https://github\.com/(?P<owner>[a-zA-Z0-9_.-]+)/(?P<name>[a-zA-Z0-9_.-]+)/?"
)


@dataclass(frozen=True)
class RepositoryReference:
    """A validated public repository reference."""

    url: str
    owner: str
    name: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"


def parse_reference(reference: object) -> RepositoryReference:
    """
    Validate ``reference`` and split it into owner and name.

    Args:
        reference: Raw reference supplied by the caller

    Returns:
        RepositoryReference with the URL normalized (no trailing slash)

    Raises:
        InvalidReferenceError: If the reference is not a string matching
            the allow-list exactly
    """
    if not isinstance(reference, str):
        raise InvalidReferenceError(repr(reference))

    match = REFERENCE_PATTERN.fullmatch(reference)
    if match is None:
        raise InvalidReferenceError(reference)

    owner = match.group("owner")
    name = match.group("name")
    return RepositoryReference(url=f"https://github.com/{owner}/{name}", owner=owner, name=name)


def is_valid_reference(reference: object) -> bool:
    """Check a reference without raising."""
    try:
        parse_reference(reference)
        return True
    except InvalidReferenceError:
        return False
