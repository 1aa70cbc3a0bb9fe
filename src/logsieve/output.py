"""Filter outputs: a rich console printer and an in-memory collector."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rich.console import Console
from rich.style import Style
from rich.text import Text

from logsieve.models import DEFAULT_COLORS

if TYPE_CHECKING:
    from logsieve.models import LogColors, Record

logger = logging.getLogger(__name__)


def render_record(record: Record, colors: LogColors, filter_name: str | None = None) -> Text:
    """Render one record as a styled line, colored by its level."""
    header = record.header
    text = Text()
    if filter_name is not None:
        text.append(f"{filter_name}: ", style=Style(bold=True))
    text.append(f"{header.time} ", style=Style(dim=True))
    text.append(
        f"{header.level.letter}/{header.tag}({header.pid_string}): {record.message}",
        style=Style(color=colors.for_level(header.level).hex),
    )
    return text


class ConsoleOutput:
    """Prints every newly accepted record of a filter to a rich console."""

    def __init__(
        self,
        console: Console | None = None,
        colors: LogColors | None = None,
        *,
        show_filter: bool = True,
    ) -> None:
        self.console = console or Console(highlight=False)
        self.colors = colors or DEFAULT_COLORS
        self.show_filter = show_filter

    def __call__(self, filter_name: str, records: list[Record], removed: int) -> None:
        if removed:
            logger.debug("%s: %d record(s) dropped from retention", filter_name, removed)
        for record in records:
            self.console.print(
                render_record(record, self.colors, filter_name if self.show_filter else None),
                soft_wrap=True,
            )


@dataclass(slots=True)
class Batch:
    """One flush notification."""

    filter_name: str
    records: list[Record]
    removed: int


@dataclass(slots=True)
class CollectingOutput:
    """Keeps every flush notification, and mirrors the filter's view of its records."""

    batches: list[Batch] = field(default_factory=list)
    view: list[Record] = field(default_factory=list)

    def __call__(self, filter_name: str, records: list[Record], removed: int) -> None:
        self.batches.append(Batch(filter_name, list(records), removed))
        # removed also counts records evicted before they were delivered, which
        # only happens once every delivered record is gone
        del self.view[:removed]
        self.view.extend(records)

    @property
    def records(self) -> list[Record]:
        """All records delivered so far, in delivery order."""
        return [record for batch in self.batches for record in batch.records]

    @property
    def removed(self) -> int:
        return sum(batch.removed for batch in self.batches)

    def clear(self) -> None:
        self.batches.clear()
        self.view.clear()
