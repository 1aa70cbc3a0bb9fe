"""Filter engine: per-filter predicates, retained subsets and pending deltas."""

from __future__ import annotations

import logging
import re
import threading
from typing import TYPE_CHECKING, Protocol

from logsieve.models import FilterMode, FilterSpec, TemporaryFilter

if TYPE_CHECKING:
    from logsieve.models import LogColors, LogLevel, Record

logger = logging.getLogger(__name__)


class FilterOutput(Protocol):
    """Receives the incremental changes of one filter after each batch."""

    def __call__(self, filter_name: str, records: list[Record], removed: int) -> None: ...


def matches_keyword(message: str, keyword: str) -> bool:
    """Check a keyword as a literal substring, then as a full-match regex.

    Raises re.error if the keyword is not a substring and not a valid pattern.
    """
    if keyword in message:
        return True
    return re.fullmatch(keyword, message) is not None


def _index_of(records: list[Record], target: Record) -> int:
    for index, record in enumerate(records):
        if record is target:
            return index
    return -1


class Filter:
    """A named predicate with its own retained records and pending delta.

    All list mutation happens under the filter's own lock. The output
    callback is invoked outside the lock with a drained copy of the delta.
    """

    def __init__(self, spec: FilterSpec, output: FilterOutput | None = None) -> None:
        self._spec = spec
        self._output = output
        self._lock = threading.Lock()
        self._records: list[Record] = []
        self._new_records: list[Record] = []
        # ids of retained records, for constant-time eviction lookups
        self._held: set[int] = set()
        self._removed_count = 0
        self._temporary = TemporaryFilter()
        self._temporary_status = False

    def __repr__(self) -> str:
        return f"Filter({self._spec.encode()!r})"

    @property
    def name(self) -> str:
        return self._spec.name

    @property
    def spec(self) -> FilterSpec:
        return self._spec

    @property
    def colors(self) -> LogColors | None:
        return self._spec.colors

    @property
    def output(self) -> FilterOutput | None:
        return self._output

    @output.setter
    def output(self, output: FilterOutput | None) -> None:
        self._output = output

    def update_spec(self, spec: FilterSpec) -> None:
        """Replace the persistent predicates. Retained records are kept."""
        if spec.name != self._spec.name:
            msg = f"Cannot rename filter {self._spec.name!r} to {spec.name!r}"
            raise ValueError(msg)
        with self._lock:
            self._spec = spec

    @property
    def records(self) -> list[Record]:
        """Snapshot of the retained records, oldest first."""
        with self._lock:
            return list(self._records)

    @property
    def pending(self) -> list[Record]:
        """Snapshot of the records accepted since the last flush."""
        with self._lock:
            return list(self._new_records)

    @property
    def removed_count(self) -> int:
        with self._lock:
            return self._removed_count

    # ---- temporary overlay ----

    @property
    def temporary(self) -> TemporaryFilter:
        return self._temporary.model_copy()

    @property
    def temporary_active(self) -> bool:
        return not self._temporary.is_empty

    @property
    def temporary_status(self) -> bool:
        """Dirty bit set whenever the overlay changes, until acknowledged."""
        return self._temporary_status

    def acknowledge_temporary_status(self) -> None:
        self._temporary_status = False

    def set_temporary(
        self,
        pid: int | None = None,
        tag: str | None = None,
        keywords: list[str] | None = None,
        min_level: LogLevel | None = None,
    ) -> None:
        """Set overlay fields. Fields passed as None (or an empty tag) keep their current value."""
        update: dict[str, object] = {}
        if pid is not None:
            update["pid"] = pid
        if tag:
            update["tag"] = tag
        if keywords is not None:
            update["keywords"] = list(keywords)
        if min_level is not None:
            update["min_level"] = min_level
        if not update:
            return
        with self._lock:
            self._temporary = self._temporary.model_copy(update=update)
        self._temporary_status = True
        logger.debug("Temporary filter on %r: %s", self.name, self._temporary)

    def clear_temporary(self) -> None:
        """Remove every overlay field."""
        with self._lock:
            was_active = not self._temporary.is_empty
            self._temporary = TemporaryFilter()
        if was_active:
            self._temporary_status = True

    # ---- matching ----

    def accept(self, record: Record) -> bool:
        """Check a record against the persistent predicates and the overlay."""
        spec = self._spec
        temporary = self._temporary
        header = record.header
        mode = spec.mode

        if mode & FilterMode.PID and spec.pid != header.pid:
            return False
        if mode & FilterMode.TAG and (not header.tag or header.tag != spec.tag):
            return False

        # The temporary level replaces the persistent one
        if temporary.min_level is not None:
            if temporary.min_level > header.level:
                return False
        elif mode & FilterMode.LEVEL and spec.min_level is not None and spec.min_level > header.level:
            return False

        if temporary.keywords is not None:
            for keyword in temporary.keywords:
                try:
                    if not matches_keyword(record.message, keyword):
                        return False
                except re.error as e:
                    logger.debug("Invalid keyword pattern %r on filter %r: %s", keyword, self.name, e)
                    return False

        if temporary.pid is not None and temporary.pid != header.pid:
            return False
        return not (temporary.tag and temporary.tag != header.tag)

    def add_record(self, record: Record, evicted: Record | None = None) -> bool:
        """Drop the evicted record if held, then retain the new one if accepted."""
        with self._lock:
            if evicted is not None:
                self._drop_evicted(evicted)
            accepted = self.accept(record)
            if accepted:
                self._records.append(record)
                self._held.add(id(record))
                self._new_records.append(record)
            return accepted

    def _drop_evicted(self, evicted: Record) -> None:
        # The buffer evicts its oldest record, which is normally the head of
        # the retained list. Anything else means records were added out of
        # buffer order.
        if id(evicted) not in self._held:
            return
        if self._records[0] is evicted:
            del self._records[0]
        else:
            index = _index_of(self._records, evicted)
            logger.warning("Evicted record found at position %d of filter %r, expected the head", index, self.name)
            del self._records[index]
        self._held.discard(id(evicted))
        self._removed_count += 1

        if self._new_records and self._new_records[0] is evicted:
            del self._new_records[0]
        elif (index := _index_of(self._new_records, evicted)) >= 0:
            del self._new_records[index]

    def flush(self) -> tuple[list[Record], int]:
        """Hand the pending delta to the output and reset it.

        Returns the drained (records, removed) pair.
        """
        with self._lock:
            records = self._new_records
            removed = self._removed_count
            self._new_records = []
            self._removed_count = 0
        if self._output is not None:
            self._output(self.name, records, removed)
        return records, removed

    def clear(self) -> None:
        """Drop all retained and pending records."""
        with self._lock:
            self._records.clear()
            self._new_records.clear()
            self._held.clear()
            self._removed_count = 0

    def rebuild(self, records: list[Record]) -> None:
        """Re-run the predicates over ``records``, replacing the retained list.

        The previous retained records count as removed and the accepted ones
        as new, so the next flush carries the full replacement.
        """
        with self._lock:
            removed = len(self._records)
            accepted = [r for r in records if self.accept(r)]
            self._records = accepted
            self._held = {id(r) for r in accepted}
            self._new_records = list(accepted)
            self._removed_count = removed
