"""Tests for epoch/day-offset helpers."""

import pytest

from wascap.timestamps import (
    SECS_PER_DAY,
    FixedClock,
    SystemClock,
    days_from_now,
    format_epoch,
    format_relative,
)

NOW = 1_700_000_000
CLOCK = FixedClock(NOW)


class TestDaysFromNow:
    def test_none(self):
        assert days_from_now(None, CLOCK) is None

    def test_zero(self):
        assert days_from_now(0, CLOCK) == NOW

    def test_offset(self):
        assert days_from_now(7, CLOCK) == NOW + 7 * SECS_PER_DAY

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            days_from_now(-1, CLOCK)

    def test_system_clock(self):
        before = SystemClock().now()
        assert days_from_now(1) >= before + SECS_PER_DAY


class TestFormatting:
    @pytest.mark.parametrize(
        "delta,expected",
        [
            (0, "now"),
            (30, "now"),
            (120, "in 2 minutes"),
            (-3600, "1 hour ago"),
            (2 * SECS_PER_DAY, "in 2 days"),
            (-SECS_PER_DAY, "1 day ago"),
        ],
    )
    def test_relative(self, delta, expected):
        assert format_relative(NOW + delta, CLOCK) == expected

    def test_epoch(self):
        assert format_epoch(0, FixedClock(0)) == "1970-01-01T00:00:00+00:00 (now)"

    @pytest.mark.parametrize("epoch", [10**12, 10**20])
    def test_epoch_beyond_datetime_range(self, epoch):
        shown = format_epoch(epoch, CLOCK)
        assert shown.startswith(f"{epoch}s since epoch (in ")
        assert shown.endswith(" days)")
