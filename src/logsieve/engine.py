"""Ingestion engine: bytes in, per-filter record batches out."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from logsieve.buffer import RetentionBuffer
from logsieve.filters import Filter
from logsieve.models import DEFAULT_COLORS, FilterSpec, LogLevel
from logsieve.parser import RecordParser
from logsieve.splitter import DEFAULT_ENCODING, DEFAULT_FALLBACK_ENCODING, LineSplitter

if TYPE_CHECKING:
    from collections.abc import Iterable

    from logsieve.filters import FilterOutput
    from logsieve.models import AppConfig, LogColors, Record

logger = logging.getLogger(__name__)

DEFAULT_FILTER_NAME = "Log"
DEFAULT_CAPACITY = 10000


class LogEngine:
    """Parses a device log stream and dispatches records to filters.

    Every record goes to each configured filter and to the catch-all filter,
    which accepts everything. Filtering is not exclusive: one record can show
    up in several filters and in the catch-all at once.

    Ingestion is serialized by one lock. Each filter guards its own lists,
    and the set of configured filters is swapped as an immutable tuple so
    registering a filter never waits on ingestion.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        default_output: FilterOutput | None = None,
        *,
        default_filter_name: str = DEFAULT_FILTER_NAME,
        colors: LogColors | None = None,
        encoding: str = DEFAULT_ENCODING,
        fallback_encoding: str = DEFAULT_FALLBACK_ENCODING,
        trim_lines: bool = True,
    ) -> None:
        self.colors = colors or DEFAULT_COLORS
        self._splitter = LineSplitter(encoding, fallback_encoding, trim=trim_lines)
        self._parser = RecordParser()
        self._buffer = RetentionBuffer(capacity)
        self._default_filter = Filter(FilterSpec(name=default_filter_name, colors=self.colors), default_output)
        self._filters: tuple[Filter, ...] = ()
        self._ingest_lock = threading.RLock()
        self._config_lock = threading.Lock()
        self._closed = False

    @classmethod
    def from_config(cls, config: AppConfig, default_output: FilterOutput | None = None) -> LogEngine:
        """Build an engine from the app config, including its saved filters."""
        engine = cls(
            config.capacity,
            default_output,
            default_filter_name=config.default_filter_name,
            encoding=config.encoding,
            fallback_encoding=config.fallback_encoding,
            trim_lines=config.trim_lines,
        )
        engine.load_filters(config.filters)
        return engine

    # ---- inbound ----

    @property
    def closed(self) -> bool:
        return self._closed

    def feed(self, data: bytes) -> list[Record]:
        """Consume a raw chunk from the transport. Returns the records it produced."""
        with self._ingest_lock:
            if self._closed:
                msg = "Cannot feed a stream that has ended"
                raise RuntimeError(msg)
            lines = self._splitter.feed(data)
            if not lines:
                return []
            return self._add_batch(lines)

    def end_of_stream(self) -> list[Record]:
        """Dispatch the last unfinished line and flush every filter one final time."""
        with self._ingest_lock:
            if self._closed:
                return []
            self._closed = True
            lines = self._splitter.flush()
            logger.debug("End of stream, %d trailing line(s)", len(lines))
            return self._add_batch(lines)

    def add_batch(self, lines: Iterable[str]) -> list[Record]:
        """Parse complete lines, dispatch the records and flush all filters once."""
        with self._ingest_lock:
            return self._add_batch(lines)

    def _add_batch(self, lines: Iterable[str]) -> list[Record]:
        filters = (*self._filters, self._default_filter)
        records = self._parser.parse(lines)
        for record in records:
            evicted = self._buffer.insert(record)
            for f in filters:
                f.add_record(record, evicted)

        for f in filters:
            f.flush()
        return records

    # ---- filter configuration ----

    @property
    def default_filter(self) -> Filter:
        """The catch-all filter."""
        return self._default_filter

    @property
    def filters(self) -> list[Filter]:
        """Configured filters, without the catch-all."""
        return list(self._filters)

    @property
    def records(self) -> list[Record]:
        """Snapshot of the retention buffer, oldest first."""
        with self._ingest_lock:
            return list(self._buffer)

    def get_filter(self, name: str) -> Filter:
        """Look up a filter by name. The catch-all is found by its name too."""
        if name == self._default_filter.name:
            return self._default_filter
        for f in self._filters:
            if f.name == name:
                return f
        msg = f"No filter named {name!r}"
        raise KeyError(msg)

    def add_filter(
        self,
        name: str,
        tag: str | None = None,
        pid: int | str | None = None,
        min_level: LogLevel | str | int | None = None,
        colors: LogColors | None = None,
        output: FilterOutput | None = None,
    ) -> Filter:
        """Create and register a filter. It starts empty and sees records from the next batch."""
        spec = FilterSpec.build(name, tag=tag, pid=pid, min_level=min_level, colors=colors or self.colors)
        return self.add_filter_spec(spec, output)

    def add_filter_spec(self, spec: FilterSpec, output: FilterOutput | None = None) -> Filter:
        if spec.colors is None:
            spec = spec.model_copy(update={"colors": self.colors})
        new_filter = Filter(spec, output)
        with self._config_lock:
            if spec.name == self._default_filter.name or any(f.name == spec.name for f in self._filters):
                msg = f"Filter {spec.name!r} already exists"
                raise ValueError(msg)
            self._filters = (*self._filters, new_filter)
        logger.debug("Added filter %s", spec.encode())
        return new_filter

    def remove_filter(self, name: str) -> Filter:
        with self._config_lock:
            removed = self.get_filter(name)
            if removed is self._default_filter:
                msg = "The catch-all filter cannot be removed"
                raise ValueError(msg)
            self._filters = tuple(f for f in self._filters if f is not removed)
        return removed

    def load_filters(self, encoded: Iterable[str]) -> list[Filter]:
        """Register filters from their persisted string form."""
        return [self.add_filter_spec(FilterSpec.decode(value)) for value in encoded]

    def saved_filters(self) -> list[str]:
        """Persisted string form of every configured filter."""
        return [f.spec.encode() for f in self._filters]

    def set_output(self, name: str, output: FilterOutput | None) -> None:
        self.get_filter(name).output = output

    def set_default_output(self, output: FilterOutput | None) -> None:
        self._default_filter.output = output

    def set_temporary_filter(
        self,
        name: str,
        pid: int | None = None,
        tag: str | None = None,
        keywords: list[str] | None = None,
        min_level: LogLevel | str | int | None = None,
    ) -> None:
        """Overlay extra constraints on a filter until cleared."""
        level = LogLevel.parse(min_level) if min_level is not None else None
        self.get_filter(name).set_temporary(pid=pid, tag=tag, keywords=keywords, min_level=level)

    def clear_temporary_filter(self, name: str) -> None:
        self.get_filter(name).clear_temporary()

    def reset_filter(self, name: str) -> None:
        """Drop a filter's retained history."""
        self.get_filter(name).clear()

    def refilter(self, name: str) -> None:
        """Rebuild a filter from the retention buffer with its current predicates, then flush it."""
        target = self.get_filter(name)
        with self._ingest_lock:
            target.rebuild(list(self._buffer))
            target.flush()
