"""Primary-key sequence port.

A sequence hands out strictly increasing primary keys for one table and
persists its position so keys are never reused, even after deletes or a
restart.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol

from segment_db.domain.value_objects import PrimaryKey


class PrimaryKeySequence(Protocol):
    """Protocol for a persisted, monotonically increasing counter."""

    @abstractmethod
    def current(self) -> int:
        """Return the last issued key (0 if none was issued yet)."""
        ...

    @abstractmethod
    def next(self) -> PrimaryKey:
        """Increment the counter, persist it and return the new value.

        Raises:
            IOFailure: If the counter cannot be read or persisted.
        """
        ...
