"""Cross-process locking and atomic writes for the JSON data files.

Every read-modify-write of a data file happens while holding an exclusive
``flock`` on a sibling lock file, so separate CLI processes cannot
interleave their updates. Writes go to a temp file that is renamed over the
target, so readers never see a half-written file.
"""

from __future__ import annotations

import fcntl
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


def lock_path_for(path: Path) -> Path:
    return path.with_name(f".{path.name}.lock")


@contextmanager
def file_lock(path: Path) -> Iterator[None]:
    """Hold an exclusive lock on *path* for a read-modify-write cycle.

    Not re-entrant: a second acquisition from the same process blocks.
    """
    lock_path = lock_path_for(path)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    with open(lock_path, "w") as lock_file:
        fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)


def write_atomic(path: Path, text: str) -> None:
    """Replace *path* with *text* in one rename."""
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}_", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(temp_path, path)
    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


def ensure_json_list(path: Path) -> None:
    """Create *path* holding an empty JSON list unless it already exists."""
    if path.exists():
        return
    with file_lock(path):
        if not path.exists():
            write_atomic(path, "[]")
