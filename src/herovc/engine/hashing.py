"""Deterministic hashing utilities for Hero.

Every object in a repository is identified by the SHA-256 digest of its
bytes, rendered as 64 lowercase hex characters.  The digest is both the
object's key and its integrity proof.
"""

from __future__ import annotations

import hashlib
import re
from pathlib import Path

DIGEST_LENGTH = 64

# Sentinel written in place of a parent digest for the root commit.
NO_PARENT = "0"

_DIGEST_RE = re.compile(r"^[0-9a-f]{64}$")
_HEX_RE = re.compile(r"^[0-9a-f]+$")

_CHUNK_SIZE = 1 << 16


def digest(data: bytes) -> str:
    """Compute the SHA-256 hex digest of a byte string.

    Args:
        data: Raw bytes.

    Returns:
        64-character lowercase hex digest.
    """
    return hashlib.sha256(data).hexdigest()


def digest_file(path: str | Path) -> str:
    """Compute the SHA-256 hex digest of a file's content.

    Reads in chunks so large files are never held in memory whole.

    Raises:
        OSError: If the file cannot be read.
    """
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            h.update(chunk)
    return h.hexdigest()


def is_digest(value: str) -> bool:
    """Whether *value* is a full 64-character lowercase hex digest."""
    return bool(_DIGEST_RE.match(value))


def is_hex_prefix(value: str, min_length: int = 4) -> bool:
    """Whether *value* could be an abbreviated digest."""
    return min_length <= len(value) < DIGEST_LENGTH and bool(_HEX_RE.match(value))
