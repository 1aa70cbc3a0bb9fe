"""Shared test fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from logsieve.engine import LogEngine
from logsieve.models import LogLevel, Record, RecordHeader
from logsieve.output import CollectingOutput

if TYPE_CHECKING:
    from pathlib import Path

SAMPLE_LINES = [
    "[ 01-02 03:04:05.678   111:0x1 I/MyTag ]",
    "hello",
    "",
    "[ 01-02 03:04:05.700   222:0x2 E/AndroidRuntime ]",
    "FATAL EXCEPTION: main",
    "\tat com.example.Main.run(Main.java:10)",
    "",
    "[ 01-02 03:04:06.001   111:0x1 W/MyTag ]",
    "low battery",
    "",
    "[ 01-02 03:04:06.123   333:0x3 D/dalvikvm ]",
    "GC_CONCURRENT freed 1024K",
    "",
]


def make_header(
    tag: str = "MyTag",
    pid: int = 111,
    level: LogLevel = LogLevel.INFO,
    time: str = "01-02 03:04:05.678",
) -> RecordHeader:
    return RecordHeader(time=time, pid=pid, pid_string=str(pid), level=level, tag=tag)


def make_record(message: str = "hello", **kwargs: object) -> Record:
    return Record(header=make_header(**kwargs), message=message)  # type: ignore[arg-type]


@pytest.fixture
def sample_payload() -> bytes:
    """Sample device output with CR-LF line endings."""
    return "".join(f"{line}\r\n" for line in SAMPLE_LINES).encode("iso-8859-1")


@pytest.fixture
def sample_log_file(tmp_path: Path, sample_payload: bytes) -> Path:
    """Create a temporary capture file with sample content."""
    log_file = tmp_path / "device.log"
    log_file.write_bytes(sample_payload)
    return log_file


@pytest.fixture
def collector() -> CollectingOutput:
    return CollectingOutput()


@pytest.fixture
def engine(collector: CollectingOutput) -> LogEngine:
    return LogEngine(capacity=100, default_output=collector)
