"""Commit codec for Hero -- the commit blob wire format.

A commit blob is line-oriented text with raw file payloads embedded by
declared length::

    COMMIT HEADER
    &&&
    parent <digest-or-0>
    [merge <digest>]              (merge commits only)
    date YYYY-MM-DD
    time HH:MM:SS UTC
    title <escaped title>
    message &<escaped message>&
    files [<digest>,<digest>,...]
    &&&&&
    <path>                        (repeated per file)
    checksum <digest>
    size <n>
    &&&
    <n raw bytes>&&&&&
    COMMIT FOOTER
    &&&
    count <n>
    size <n>
    &&&&&

Payloads are never escaped: the ``size`` field says exactly how many
bytes to slice, so content may hold any byte sequence, delimiters
included.  Title and message are escaped with an ordered two-rule table
so they can never contain a bare ``&``.

Decoding is positional.  Carriage returns are discarded from every line
before comparison so blobs that went through a CRLF conversion still
parse.  Footer counters that disagree with the records are reported as a
warning, never rejected.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

from herovc.engine.hashing import NO_PARENT, is_digest
from herovc.exceptions import CommitFormatError, TruncatedCommitError
from herovc.models.commit import Commit, FileEntry

logger = logging.getLogger(__name__)

HEADER_MARKER = b"COMMIT HEADER"
FOOTER_MARKER = b"COMMIT FOOTER"
SECTION_OPEN = b"&&&"
SECTION_CLOSE = b"&&&&&"

# Ordered: "/" must be escaped before "&" because the "&" placeholder
# itself starts with "/".
ESCAPE_TABLE: tuple[tuple[str, str], ...] = (
    ("/", "/sl;"),
    ("&", "/amp;"),
)

_ESCAPE_MAP = dict(ESCAPE_TABLE)
_UNESCAPE_MAP = {placeholder: literal for literal, placeholder in ESCAPE_TABLE}
_UNESCAPE_RE = re.compile("|".join(re.escape(p) for p in _UNESCAPE_MAP))

_DATE_FORMAT = "%Y-%m-%d"
_TIME_FORMAT = "%H:%M:%S"


def escape_text(text: str) -> str:
    """Apply the escape table in a single pass."""
    return "".join(_ESCAPE_MAP.get(ch, ch) for ch in text)


def unescape_text(text: str) -> str:
    """Reverse :func:`escape_text` in a single pass.

    Unknown ``/...`` sequences are left as they are.
    """
    return _UNESCAPE_RE.sub(lambda m: _UNESCAPE_MAP[m.group(0)], text)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode_commit(commit: Commit) -> bytes:
    """Serialize a Commit to its blob form.

    Footer counters are always derived from ``commit.files``.

    Raises:
        CommitFormatError: If the title or a path contains a line break,
            a path equals the footer marker, or a file entry's size
            disagrees with its content.
    """
    if "\n" in commit.title or "\r" in commit.title:
        raise CommitFormatError("Commit title must be a single line")

    parts: list[bytes] = [HEADER_MARKER, b"\n", SECTION_OPEN, b"\n"]
    parts.append(_line("parent", commit.parent or NO_PARENT))
    if commit.merge_parent is not None:
        parts.append(_line("merge", commit.merge_parent))
    parts.append(_line("date", commit.timestamp.strftime(_DATE_FORMAT)))
    parts.append(_line("time", commit.timestamp.strftime(_TIME_FORMAT) + " UTC"))
    parts.append(_line("title", escape_text(commit.title)))
    parts.append(b"message &" + escape_text(commit.message).encode("utf-8") + b"&\n")
    parts.append(
        b"files [" + ",".join(f.digest for f in commit.files).encode("ascii") + b"]\n"
    )
    parts.append(SECTION_CLOSE + b"\n")

    for entry in commit.files:
        if "\n" in entry.path or "\r" in entry.path:
            raise CommitFormatError(f"File path must be a single line: {entry.path!r}")
        if entry.path.encode("utf-8") == FOOTER_MARKER:
            raise CommitFormatError(f"File path {entry.path!r} collides with the footer marker")
        if len(entry.content) != entry.size:
            raise CommitFormatError(
                f"File {entry.path} declares {entry.size} bytes "
                f"but carries {len(entry.content)}"
            )
        parts.append(entry.path.encode("utf-8") + b"\n")
        parts.append(_line("checksum", entry.digest))
        parts.append(_line("size", str(entry.size)))
        parts.append(SECTION_OPEN + b"\n")
        parts.append(entry.content)
        parts.append(SECTION_CLOSE + b"\n")

    parts.append(FOOTER_MARKER + b"\n")
    parts.append(SECTION_OPEN + b"\n")
    parts.append(_line("count", str(commit.count)))
    parts.append(_line("size", str(commit.total_size)))
    parts.append(SECTION_CLOSE + b"\n")
    return b"".join(parts)


def _line(key: str, value: str) -> bytes:
    return f"{key} {value}\n".encode("utf-8")


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


class _BlobReader:
    """Cursor over a commit blob.  Lines are returned without CR/LF."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self.pos = 0

    def read_line(self, wanted: str) -> bytes:
        end = self._data.find(b"\n", self.pos)
        if end == -1:
            raise TruncatedCommitError(self.pos, wanted)
        line = self._data[self.pos:end].replace(b"\r", b"")
        self.pos = end + 1
        return line

    def read_exact(self, size: int, wanted: str) -> bytes:
        end = self.pos + size
        if end > len(self._data):
            raise TruncatedCommitError(self.pos, wanted)
        chunk = self._data[self.pos:end]
        self.pos = end
        return chunk

    def read_until(self, delimiter: bytes, wanted: str) -> bytes:
        end = self._data.find(delimiter, self.pos)
        if end == -1:
            raise TruncatedCommitError(self.pos, wanted)
        chunk = self._data[self.pos:end]
        self.pos = end + len(delimiter)
        return chunk

    def expect_line(self, expected: bytes) -> None:
        offset = self.pos
        line = self.read_line(expected.decode("ascii"))
        if line != expected:
            raise CommitFormatError(
                f"Expected {expected.decode('ascii')!r} at byte {offset}, "
                f"got {_preview(line)!r}"
            )

    def field(self, key: str) -> str:
        """Read a ``<key> <value>`` line and return the value."""
        offset = self.pos
        line = self.read_line(f"'{key}' field")
        prefix = key.encode("ascii") + b" "
        if not line.startswith(prefix):
            raise CommitFormatError(
                f"Expected '{key}' field at byte {offset}, got {_preview(line)!r}"
            )
        return _decode_text(line[len(prefix):], key)

    def peek_startswith(self, prefix: bytes) -> bool:
        return self._data.startswith(prefix, self.pos)


def decode_commit(data: bytes) -> Commit:
    """Parse a commit blob into a Commit.

    Raises:
        TruncatedCommitError: If the blob ends before a field or payload.
        CommitFormatError: If a field is missing, out of order, or malformed.
    """
    reader = _BlobReader(data)

    reader.expect_line(HEADER_MARKER)
    reader.expect_line(SECTION_OPEN)

    parent = _parse_parent(reader.field("parent"))
    merge_parent = None
    if reader.peek_startswith(b"merge "):
        merge_parent = _parse_digest(reader.field("merge"), "merge")

    date_str = reader.field("date")
    time_str = reader.field("time")
    timestamp = _parse_timestamp(date_str, time_str)

    title = unescape_text(reader.field("title"))

    if not reader.peek_startswith(b"message &"):
        raise CommitFormatError(f"Expected 'message' field at byte {reader.pos}")
    reader.read_exact(len(b"message &"), "message")
    raw_message = reader.read_until(b"&", "end of message")
    message = unescape_text(
        _decode_text(raw_message, "message").replace("\r\n", "\n")
    )
    trailing = reader.read_line("end of message line")
    if trailing:
        raise CommitFormatError(
            f"Unexpected text after message: {_preview(trailing)!r}"
        )

    listed = _parse_file_list(reader.field("files"))
    reader.expect_line(SECTION_CLOSE)

    files: list[FileEntry] = []
    while True:
        line = reader.read_line("file record or footer")
        if line == FOOTER_MARKER:
            break
        path = _decode_text(line, "path")
        checksum = _parse_digest(reader.field("checksum"), "checksum")
        size = _parse_int(reader.field("size"), "size")
        reader.expect_line(SECTION_OPEN)
        content = reader.read_exact(size, f"{size} bytes of {path}")
        reader.expect_line(SECTION_CLOSE)
        files.append(FileEntry(path=path, digest=checksum, size=size, content=content))

    reader.expect_line(SECTION_OPEN)
    declared_count = _parse_int(reader.field("count"), "count")
    declared_size = _parse_int(reader.field("size"), "size")
    reader.expect_line(SECTION_CLOSE)

    commit = Commit(
        parent=parent,
        merge_parent=merge_parent,
        timestamp=timestamp,
        title=title,
        message=message,
        files=files,
        declared_count=declared_count,
        declared_size=declared_size,
    )

    recorded = [f.digest for f in files]
    if listed != recorded:
        logger.warning(
            "Commit header lists %d digest(s) that do not match the %d file record(s)",
            len(listed),
            len(recorded),
        )
    for anomaly in commit.footer_anomalies():
        logger.warning("Commit footer mismatch: %s", anomaly)

    return commit


def _parse_parent(value: str) -> str | None:
    if value == NO_PARENT:
        return None
    return _parse_digest(value, "parent")


def _parse_digest(value: str, name: str) -> str:
    if not is_digest(value):
        raise CommitFormatError(f"Malformed {name} digest: {value!r}")
    return value


def _parse_int(value: str, name: str) -> int:
    if not (value.isascii() and value.isdigit()):
        raise CommitFormatError(f"Malformed integer in '{name}' field: {value!r}")
    return int(value)


def _parse_file_list(value: str) -> list[str]:
    if not (value.startswith("[") and value.endswith("]")):
        raise CommitFormatError(f"Malformed files list: {value!r}")
    # A trailing comma is tolerated.
    return [d for d in value[1:-1].split(",") if d]


def _parse_timestamp(date_str: str, time_str: str) -> datetime:
    if not time_str.endswith(" UTC"):
        raise CommitFormatError(f"Time field must be in UTC: {time_str!r}")
    try:
        parsed = datetime.strptime(
            f"{date_str} {time_str[:-4]}", f"{_DATE_FORMAT} {_TIME_FORMAT}"
        )
    except ValueError as e:
        raise CommitFormatError(f"Malformed date/time: {e}") from None
    return parsed.replace(tzinfo=timezone.utc)


def _decode_text(raw: bytes, name: str) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        raise CommitFormatError(f"Field '{name}' is not valid UTF-8") from None


def _preview(line: bytes) -> str:
    text = line[:40].decode("utf-8", errors="replace")
    return text + "..." if len(line) > 40 else text
