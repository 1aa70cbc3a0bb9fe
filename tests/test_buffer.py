"""Tests for the retention buffer."""

from __future__ import annotations

import pytest
from conftest import make_record

from logsieve.buffer import RetentionBuffer


class TestRetentionBuffer:
    def test_capacity_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="at least 1"):
            RetentionBuffer(0)

    def test_empty(self) -> None:
        buffer = RetentionBuffer(3)
        assert len(buffer) == 0
        assert list(buffer) == []
        assert buffer.capacity == 3

    def test_insert_below_capacity(self) -> None:
        buffer = RetentionBuffer(3)
        a, b = make_record("A"), make_record("B")
        assert buffer.insert(a) is None
        assert buffer.insert(b) is None
        assert list(buffer) == [a, b]

    def test_capacity_three_evicts_oldest(self) -> None:
        buffer = RetentionBuffer(3)
        a, b, c, d = (make_record(m) for m in "ABCD")
        evicted = [buffer.insert(r) for r in (a, b, c, d)]
        assert evicted == [None, None, None, a]
        assert evicted[3] is a
        assert [r.message for r in buffer] == ["B", "C", "D"]
        assert len(buffer) == 3

    def test_keeps_most_recent_in_order(self) -> None:
        buffer = RetentionBuffer(5)
        records = [make_record(str(i)) for i in range(23)]
        evicted = [buffer.insert(r) for r in records]
        assert list(buffer) == records[-5:]
        assert [e for e in evicted if e is not None] == records[:18]

    def test_capacity_one(self) -> None:
        buffer = RetentionBuffer(1)
        a, b, c = (make_record(m) for m in "ABC")
        assert buffer.insert(a) is None
        assert buffer.insert(b) is a
        assert buffer.insert(c) is b
        assert list(buffer) == [c]

    def test_identical_records_are_distinct(self) -> None:
        buffer = RetentionBuffer(2)
        first, second, third = make_record("same"), make_record("same"), make_record("same")
        buffer.insert(first)
        buffer.insert(second)
        assert buffer.insert(third) is first

    def test_clear(self) -> None:
        buffer = RetentionBuffer(2)
        buffer.insert(make_record("A"))
        buffer.clear()
        assert len(buffer) == 0
        assert buffer.insert(make_record("B")) is None
