"""Tests for the recency window filter."""

import pytest

from hivesense.schemas import Reading
from hivesense.services.windows import (
    PERIOD_DURATIONS_MS,
    fetch_count_for_period,
    filter_window,
)
from hivesense.utils.timestamps import DAY_MS, HOUR_MS

NOW = 1_700_000_000_000


def _series(ages_ms):
    return tuple(Reading(timestamp=NOW - age, weight=30.0) for age in sorted(ages_ms, reverse=True))


def test_today_keeps_last_24h():
    series = _series([0, HOUR_MS, DAY_MS, DAY_MS + 1, 3 * DAY_MS])
    result = filter_window(series, "today", now=NOW)
    assert [NOW - r.timestamp for r in result] == [DAY_MS, HOUR_MS, 0]


def test_boundary_is_inclusive():
    series = _series([7 * DAY_MS])
    assert len(filter_window(series, "7days", now=NOW)) == 1
    assert len(filter_window(_series([7 * DAY_MS + 1]), "7days", now=NOW)) == 0


@pytest.mark.parametrize("period_key", ["today", "3days", "7days", "30days", "all"])
def test_result_is_ordered_subsequence(period_key):
    series = _series([0, 5 * HOUR_MS, 2 * DAY_MS, 5 * DAY_MS, 20 * DAY_MS, 90 * DAY_MS])
    result = filter_window(series, period_key, now=NOW)
    # Order preserved and every element drawn from the input
    positions = [series.index(r) for r in result]
    assert positions == sorted(positions)
    duration = PERIOD_DURATIONS_MS[period_key]
    if duration is not None:
        assert all(NOW - r.timestamp <= duration for r in result)


def test_all_is_unbounded():
    series = _series([0, 365 * DAY_MS])
    assert filter_window(series, "all", now=NOW) == series
    assert filter_window(series, "custom", now=NOW) == series


def test_input_not_mutated():
    series = _series([0, 40 * DAY_MS])
    snapshot = tuple(series)
    filter_window(series, "30days", now=NOW)
    assert series == snapshot


def test_future_readings_kept():
    series = (Reading(timestamp=NOW + HOUR_MS, weight=30.0),)
    assert len(filter_window(series, "today", now=NOW)) == 1


def test_unknown_period_raises():
    with pytest.raises(ValueError, match="Unsupported period"):
        filter_window((), "fortnight")


def test_fetch_count_for_period():
    assert fetch_count_for_period("today") == 24
    assert fetch_count_for_period("7days") == 168
    assert fetch_count_for_period("all") == 8000
    with pytest.raises(ValueError):
        fetch_count_for_period("yearly")
