"""Filesystem primitives used by the storage layer.

Thin wrappers with fixed contracts so the rest of the package never
touches ``os``/``shutil`` directly:

- ``make_dirs``: create a directory and its parents; existing is fine.
- ``copy_file``: copy bytes from one path to another, replacing the target.
- ``copy_tree``: copy a directory recursively to a new location.
- ``list_entries``: names in a directory, sorted; raises if unreadable.
- ``remove_file``: delete a file; missing is fine.
- ``remove_tree``: delete a directory recursively; missing is fine.
- ``remove_empty_dir``: delete a directory only if it is empty.
- ``write_file``: write bytes via a temp file and an atomic rename.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path


def make_dirs(path: str | Path) -> None:
    os.makedirs(path, exist_ok=True)


def copy_file(src: str | Path, dst: str | Path) -> None:
    shutil.copyfile(src, dst)


def copy_tree(src: str | Path, dst: str | Path) -> None:
    shutil.copytree(src, dst)


def list_entries(path: str | Path) -> list[str]:
    return sorted(os.listdir(path))


def remove_file(path: str | Path) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def remove_tree(path: str | Path) -> None:
    if os.path.isdir(path):
        shutil.rmtree(path)


def write_file(path: str | Path, data: bytes) -> None:
    """Write *data* to *path*, replacing it atomically."""
    path = Path(path)
    tmp = path.with_name(f".{path.name}.tmp")
    try:
        with open(tmp, "wb") as f:
            f.write(data)
        os.replace(tmp, path)
    except OSError:
        remove_file(tmp)
        raise


def read_first_line(path: str | Path) -> str | None:
    """First line of a text file without its line ending, or None if absent."""
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            line = f.readline()
    except FileNotFoundError:
        return None
    return line.rstrip("\r\n")


def remove_empty_dir(path: str | Path) -> bool:
    """Delete *path* if it is an empty directory.  Returns whether it was removed."""
    try:
        os.rmdir(path)
    except OSError:
        return False
    return True
