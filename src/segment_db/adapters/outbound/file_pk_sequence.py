"""File-backed primary-key sequence.

The counter lives in ``<table>/<table>_pk_sequence`` as decimal text
holding the last issued key. Each increment replaces the file through a
temporary sibling and ``os.replace`` so a crash never leaves a partially
written counter behind.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path

from segment_db.domain.errors import IOFailure
from segment_db.domain.value_objects import PrimaryKey


class FilePrimaryKeySequence:
    """PrimaryKeySequence persisted in a small text file."""

    def __init__(self, path: str | Path, sync: bool = True) -> None:
        """Initialize the sequence.

        Args:
            path: Counter file location. A missing file counts as 0.
            sync: If True, fsync the counter before it is published.
        """
        self._path = Path(path)
        self._sync = sync
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def initialize(self) -> None:
        """Create the counter file holding 0 if it does not exist yet."""
        if self._path.exists():
            return
        with self._lock:
            self._store(0)

    def current(self) -> int:
        with self._lock:
            return self._load()

    def next(self) -> PrimaryKey:
        with self._lock:
            value = self._load() + 1
            self._store(value)
            return PrimaryKey(value)

    def _load(self) -> int:
        try:
            text = self._path.read_text(encoding="ascii").strip()
        except FileNotFoundError:
            return 0
        except (OSError, UnicodeDecodeError) as e:
            raise IOFailure(self._path, f"cannot read sequence: {e}") from e
        if not text:
            return 0
        try:
            value = int(text)
        except ValueError as e:
            raise IOFailure(self._path, f"invalid sequence value {text!r}") from e
        if value < 0:
            raise IOFailure(self._path, f"invalid sequence value {text!r}")
        return value

    def _store(self, value: int) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="ascii") as f:
                f.write(str(value))
                f.flush()
                if self._sync:
                    os.fsync(f.fileno())
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise IOFailure(self._path, f"cannot persist sequence: {e}") from e
