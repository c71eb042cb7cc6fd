"""Tests for digest utilities.

Includes property-based tests via Hypothesis.
"""

from __future__ import annotations

import hashlib

from hypothesis import given
from hypothesis import strategies as st

from herovc.engine.hashing import digest, digest_file, is_digest, is_hex_prefix


class TestDigest:
    """Tests for digest()."""

    def test_known_value(self) -> None:
        assert digest(b"hi") == hashlib.sha256(b"hi").hexdigest()

    def test_hex_digest_format(self) -> None:
        h = digest(b"anything")
        assert len(h) == 64
        assert all(c in "0123456789abcdef" for c in h)

    def test_different_content_different_digest(self) -> None:
        assert digest(b"a") != digest(b"b")

    @given(st.binary(max_size=2048))
    def test_deterministic(self, data: bytes) -> None:
        assert digest(data) == digest(bytes(data))
        assert is_digest(digest(data))


class TestDigestFile:
    def test_matches_in_memory_digest(self, tmp_path) -> None:
        data = bytes(range(256)) * 600  # spans several read chunks
        path = tmp_path / "blob"
        path.write_bytes(data)
        assert digest_file(path) == digest(data)

    def test_empty_file(self, tmp_path) -> None:
        path = tmp_path / "empty"
        path.write_bytes(b"")
        assert digest_file(path) == digest(b"")


class TestDigestShapes:
    def test_is_digest(self) -> None:
        assert is_digest("a" * 64)
        assert not is_digest("A" * 64)
        assert not is_digest("a" * 63)
        assert not is_digest("g" * 64)
        assert not is_digest("0")

    def test_is_hex_prefix(self) -> None:
        assert is_hex_prefix("abcd")
        assert is_hex_prefix("0123456789")
        assert not is_hex_prefix("abc")
        assert not is_hex_prefix("main")
        assert not is_hex_prefix("a" * 64)
