"""Safe file I/O utilities.

Provides whole-file replacement and locked read-modify-write for JSON
collections, using file locking (``fcntl``) and ``fsync`` to minimise data
loss on crash or concurrent access.
"""

from __future__ import annotations

import fcntl
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator

logger = logging.getLogger(__name__)


def _lock_path(path: Path) -> Path:
    return path.with_name(path.name + ".lock")


def safe_read_text(path: Path) -> str | None:
    """Read a file under a shared lock.  Returns ``None`` if it is missing."""
    if not path.exists():
        return None
    with open(_lock_path(path), "a") as lock:
        fcntl.flock(lock.fileno(), fcntl.LOCK_SH)
        try:
            return path.read_text(encoding="utf-8")
        finally:
            fcntl.flock(lock.fileno(), fcntl.LOCK_UN)



def _replace(path: Path, text: str) -> None:
    """Atomic replace; the caller holds the exclusive lock."""
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent,
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


@contextmanager
def _exclusive(path: Path) -> Iterator[None]:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(_lock_path(path), "a") as lock:
        fcntl.flock(lock.fileno(), fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(lock.fileno(), fcntl.LOCK_UN)


def safe_write_text(path: Path, text: str) -> None:
    """Replace the whole file contents atomically.

    * ``fcntl.LOCK_EX`` on a sidecar ``.lock`` file serialises writers
      from concurrent processes sharing the same data directory.
    * The payload goes to a temp file in the same directory, is
      ``fsync``ed, then ``os.replace``d over the target, so readers see
      either the old array or the new one, never a partial write.
    """
    with _exclusive(path):
        _replace(path, text)
    logger.debug("Wrote %d bytes to %s", len(text), path)


def safe_update_text(path: Path, update: Callable[[str | None], str | None]) -> bool:
    """Read, transform and replace a file under one exclusive lock.

    ``update`` receives the current text (``None`` if the file is
    missing) and returns the new text, or ``None`` to leave the file as
    it is.  No other writer can slip in between the read and the
    replace.  Returns True if the file was written.
    """
    with _exclusive(path):
        current = path.read_text(encoding="utf-8") if path.exists() else None
        text = update(current)
        if text is None:
            return False
        _replace(path, text)
    logger.debug("Updated %s (%d bytes)", path, len(text))
    return True


def safe_remove(path: Path) -> None:
    """Delete a file under the exclusive lock; a missing file is fine."""
    with _exclusive(path):
        path.unlink(missing_ok=True)
