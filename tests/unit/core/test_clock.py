"""Unit tests for clocks and day-key policies."""

from datetime import datetime, timedelta, timezone

import pytest

from petengine.core.clock import FixedClock, SystemClock, ensure_utc, offset_day_key, utc_day_key


@pytest.mark.unit
class TestClocks:
    def test_fixed_clock_advances(self):
        clock = FixedClock(datetime(2024, 1, 1, tzinfo=timezone.utc))

        clock.advance(hours=25)

        assert clock.now() == datetime(2024, 1, 2, 1, tzinfo=timezone.utc)

    def test_fixed_clock_set_normalizes_naive(self):
        clock = FixedClock(datetime(2024, 1, 1, tzinfo=timezone.utc))

        clock.set(datetime(2024, 6, 1, 12))

        assert clock.now().tzinfo is timezone.utc

    def test_system_clock_is_aware(self):
        assert SystemClock().now().tzinfo is not None

    def test_ensure_utc_converts_offsets(self):
        plus_two = timezone(timedelta(hours=2))

        assert ensure_utc(datetime(2024, 1, 1, 2, tzinfo=plus_two)) == datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.mark.unit
class TestDayKeys:
    def test_utc_day_key(self):
        assert utc_day_key(datetime(2024, 3, 1, 23, 59, tzinfo=timezone.utc)) == "2024-03-01"

    def test_offset_day_key_rolls_over_at_local_midnight(self):
        policy = offset_day_key(-300)

        assert policy(datetime(2024, 3, 2, 4, 59, tzinfo=timezone.utc)) == "2024-03-01"
        assert policy(datetime(2024, 3, 2, 5, 0, tzinfo=timezone.utc)) == "2024-03-02"
