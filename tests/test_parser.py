"""Tests for header parsing and record reassembly."""

from __future__ import annotations

import pytest

from logsieve.models import LogLevel, RecordHeader
from logsieve.parser import RecordParser, parse_header


class TestParseHeader:
    def test_basic_header(self) -> None:
        header = parse_header("[ 01-02 03:04:05.678  111:0x1 I/MyTag]")
        assert header is not None
        assert header.time == "01-02 03:04:05.678"
        assert header.pid == 111
        assert header.pid_string == "111"
        assert header.level == LogLevel.INFO
        assert header.tag == "MyTag"

    def test_tag_trimmed(self) -> None:
        header = parse_header("[ 12-31 23:59:59.999  4242:0x1a2b E/ActivityManager   ]")
        assert header is not None
        assert header.tag == "ActivityManager"
        assert header.level == LogLevel.ERROR
        assert header.pid == 4242

    @pytest.mark.parametrize(
        ("letter", "level"),
        [("V", LogLevel.VERBOSE), ("D", LogLevel.DEBUG), ("I", LogLevel.INFO), ("W", LogLevel.WARN), ("E", LogLevel.ERROR)],
    )
    def test_level_letters(self, letter: str, level: LogLevel) -> None:
        header = parse_header(f"[ 01-02 03:04:05.678  1:0x1 {letter}/T ]")
        assert header is not None
        assert header.level == level

    def test_tag_with_slash_and_spaces(self) -> None:
        header = parse_header("[ 01-02 03:04:05.678  1:0x1 I/my tag/sub ]")
        assert header is not None
        assert header.tag == "my tag/sub"

    def test_empty_pid(self) -> None:
        header = parse_header("[ 01-02 03:04:05.678  :0x1 I/T ]")
        assert header is not None
        assert header.pid == 0
        assert header.pid_string == ""

    @pytest.mark.parametrize(
        "line",
        [
            "hello",
            "[ 01-02 03:04:05.678  111:0x1 F/MyTag ]",
            "[ 01-02 03:04:05.678  111:1 I/MyTag ]",
            "[01-02 03:04:05.678  111:0x1 I/MyTag ]",
            "[ 01-02 03:04:05.678  111:0x1 I/MyTag",
            "[ 01-02 03:04:05  111:0x1 I/MyTag ]",
            "prefix [ 01-02 03:04:05.678  111:0x1 I/MyTag ]",
        ],
    )
    def test_non_headers(self, line: str) -> None:
        assert parse_header(line) is None


class TestRecordParser:
    def setup_method(self) -> None:
        self.parser = RecordParser()

    def test_header_then_body(self) -> None:
        records = self.parser.parse(["[ 01-02 03:04:05.678  111:0x1 I/MyTag]", "hello"])
        assert len(records) == 1
        record = records[0]
        assert record.header.time == "01-02 03:04:05.678"
        assert record.header.pid == 111
        assert record.header.level == LogLevel.INFO
        assert record.header.tag == "MyTag"
        assert record.message == "hello"

    def test_multi_line_message_shares_header(self) -> None:
        records = self.parser.parse(["[ 01-02 03:04:05.678  1:0x1 E/Crash ]", "line one", "line two", "line three"])
        assert [r.message for r in records] == ["line one", "line two", "line three"]
        assert records[0].header is records[1].header is records[2].header

    def test_empty_lines_skipped(self) -> None:
        records = self.parser.parse(["", "[ 01-02 03:04:05.678  1:0x1 I/T ]", "", "body", ""])
        assert [r.message for r in records] == ["body"]

    def test_tabs_expanded(self) -> None:
        records = self.parser.parse(["[ 01-02 03:04:05.678  1:0x1 I/T ]", "\tat Foo.bar\t(x)"])
        assert records[0].message == "    at Foo.bar    (x)"

    def test_body_before_header_gets_placeholder(self) -> None:
        records = self.parser.parse(["orphan", "another orphan"])
        assert records[0].header == RecordHeader.unknown()
        assert records[0].header is records[1].header

    def test_placeholder_replaced_by_real_header(self) -> None:
        records = self.parser.parse(["orphan", "[ 01-02 03:04:05.678  7:0x1 W/Real ]", "real body"])
        assert records[0].header.tag == "<unknown>"
        assert records[1].header.tag == "Real"

    def test_malformed_header_is_body(self) -> None:
        records = self.parser.parse(["[ 01-02 03:04:05.678  1:0x1 Q/T ]"])
        assert len(records) == 1
        assert records[0].message == "[ 01-02 03:04:05.678  1:0x1 Q/T ]"

    def test_header_state_survives_calls(self) -> None:
        self.parser.parse(["[ 01-02 03:04:05.678  5:0x1 D/Keep ]"])
        records = self.parser.parse(["continued"])
        assert records[0].header.tag == "Keep"

    def test_header_without_body_produces_nothing(self) -> None:
        assert self.parser.parse(["[ 01-02 03:04:05.678  5:0x1 D/T ]"]) == []

    def test_reset(self) -> None:
        self.parser.parse(["[ 01-02 03:04:05.678  5:0x1 D/T ]"])
        self.parser.reset()
        assert self.parser.parse(["x"])[0].header.tag == "<unknown>"

    def test_every_record_has_most_recent_header(self) -> None:
        lines = [
            "a",
            "[ 01-01 00:00:00.000  1:0x1 I/One ]",
            "b",
            "c",
            "[ 01-01 00:00:00.001  2:0x1 W/Two ]",
            "[ 01-01 00:00:00.002  3:0x1 E/Three ]",
            "d",
        ]
        records = self.parser.parse(lines)
        assert [(r.message, r.header.tag) for r in records] == [
            ("a", "<unknown>"),
            ("b", "One"),
            ("c", "One"),
            ("d", "Three"),
        ]
