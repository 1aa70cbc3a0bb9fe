"""Fixed-capacity circular store of the most recent records."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from logsieve.models import Record


class RetentionBuffer:
    """Ring of ``capacity`` slots. Inserting into a full ring evicts the oldest record."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            msg = f"Buffer capacity must be at least 1, got {capacity}"
            raise ValueError(msg)
        self._capacity = capacity
        self._slots: list[Record | None] = [None] * capacity
        # -1 while the buffer has never been written
        self._start = -1
        self._end = -1
        self._size = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return self._size

    def insert(self, record: Record) -> Record | None:
        """Store a record, returning the record it evicted (at most one)."""
        if self._start == -1:
            index = self._start = 0
            self._end = 1 % self._capacity
        else:
            index = self._end
            if self._end == self._start:
                self._start = (self._start + 1) % self._capacity
            self._end = (self._end + 1) % self._capacity

        evicted = self._slots[index]
        self._slots[index] = record
        if evicted is None:
            self._size += 1
        return evicted

    def __iter__(self) -> Iterator[Record]:
        """Iterate oldest to newest."""
        for offset in range(self._size):
            record = self._slots[(self._start + offset) % self._capacity]
            if record is not None:
                yield record

    def clear(self) -> None:
        self._slots = [None] * self._capacity
        self._start = -1
        self._end = -1
        self._size = 0
