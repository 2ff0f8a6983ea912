"""Tests for RetentionBuffer."""

import pytest

from patternbus.core.message_bus.retention import DEFAULT_MAX, RetentionBuffer
from patternbus.utils.errors import ConfigurationError


class TestRetentionBuffer:
    """Test suite for RetentionBuffer."""

    def test_initialization(self):
        buffer = RetentionBuffer()
        assert buffer.max == DEFAULT_MAX == 32
        assert len(buffer) == 0
        assert not buffer
        assert buffer.snapshot() == []

    def test_append_keeps_order(self):
        buffer = RetentionBuffer(max=5)
        for item in ("1st", "2nd", "3rd"):
            assert buffer.append(item) is None

        assert buffer.snapshot() == ["1st", "2nd", "3rd"]
        assert list(buffer) == ["1st", "2nd", "3rd"]
        assert buffer

    def test_evicts_oldest_when_full(self):
        buffer = RetentionBuffer(max=2)
        buffer.append("1st")
        buffer.append("2nd")

        evicted = buffer.append("3rd")

        assert evicted == "1st"
        assert buffer.snapshot() == ["2nd", "3rd"]
        assert len(buffer) == 2

    def test_never_exceeds_max(self):
        buffer = RetentionBuffer(max=3)
        for i in range(100):
            buffer.append(i)
            assert len(buffer) <= 3

        assert buffer.snapshot() == [97, 98, 99]

    def test_clear(self):
        buffer = RetentionBuffer(max=3)
        buffer.append("1st")
        buffer.clear()

        assert len(buffer) == 0
        assert buffer.snapshot() == []

    def test_snapshot_is_a_copy(self):
        buffer = RetentionBuffer()
        buffer.append("1st")
        snapshot = buffer.snapshot()
        snapshot.append("not stored")

        assert buffer.snapshot() == ["1st"]

    @pytest.mark.parametrize("max", [0, -1, 1.5, "32", True, None])
    def test_invalid_max(self, max):
        with pytest.raises(ConfigurationError):
            RetentionBuffer(max=max)
