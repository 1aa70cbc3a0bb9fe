"""Record parsing: header detection and multi-line body reassembly."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from logsieve.models import LogLevel, Record, RecordHeader

if TYPE_CHECKING:
    from collections.abc import Iterable

# "[ 01-02 03:04:05.678  111:0x1 I/MyTag ]"
HEADER_RE = re.compile(
    r"^\[\s(?P<time>\d\d-\d\d\s\d\d:\d\d:\d\d\.\d+)"
    r"\s+(?P<pid>\d*):(?P<tid>0x[0-9a-fA-F]+)\s(?P<level>[VDIWE])/(?P<tag>.*)\]$"
)

TAB_EXPANSION = "    "


def parse_header(line: str) -> RecordHeader | None:
    """Parse a header line, returning None if the line is not a header."""
    m = HEADER_RE.match(line)
    if m is None:
        return None
    pid_string = m.group("pid")
    return RecordHeader(
        time=m.group("time"),
        pid=int(pid_string) if pid_string else 0,
        pid_string=pid_string,
        level=LogLevel.from_letter(m.group("level")),
        tag=m.group("tag").strip(),
    )


class RecordParser:
    """Turns complete lines into Records.

    A header line becomes the current header and produces no record. Every
    following body line becomes one Record sharing that header instance,
    which is how messages with embedded newlines are reassembled.
    """

    def __init__(self) -> None:
        self.current_header: RecordHeader | None = None

    def reset(self) -> None:
        """Forget the current header."""
        self.current_header = None

    def parse(self, lines: Iterable[str]) -> list[Record]:
        records: list[Record] = []
        for line in lines:
            if not line:
                continue

            header = parse_header(line)
            if header is not None:
                self.current_header = header
                continue

            if self.current_header is None:
                self.current_header = RecordHeader.unknown()
            records.append(Record(header=self.current_header, message=line.replace("\t", TAB_EXPANSION)))
        return records
