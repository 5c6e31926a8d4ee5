"""Artifact identifier key space.

Clients choose artifact hashes and the store uses them as file names, so
every identifier arriving from the network is checked here before it gets
anywhere near the filesystem.

Accepted: 1-128 characters from ``[A-Za-z0-9._-]``, starting with an
alphanumeric character.  That rules out path separators, ``..`` traversal,
NUL bytes and whitespace.  Names starting with a dot are reserved for the
store's in-flight temporary files.
"""

from __future__ import annotations

import re

MAX_HASH_LENGTH = 128

_HASH_PATTERN = re.compile(r"[A-Za-z0-9][A-Za-z0-9._-]*")


class InvalidArtifactHashError(ValueError):
    """Raised when an identifier falls outside the safe key space."""


def is_valid_artifact_hash(value: object) -> bool:
    """Return ``True`` if *value* can be used as a storage key."""
    return (
        isinstance(value, str)
        and 0 < len(value) <= MAX_HASH_LENGTH
        and _HASH_PATTERN.fullmatch(value) is not None
    )


def validate_artifact_hash(value: object) -> str:
    """Return *value* unchanged if it is a safe storage key.

    Raises
    ------
    InvalidArtifactHashError
        If the identifier is empty, too long, or contains anything outside
        the accepted character set.
    """
    if not is_valid_artifact_hash(value):
        raise InvalidArtifactHashError(f"Invalid artifact hash: {value!r}")
    return value  # type: ignore[return-value]
