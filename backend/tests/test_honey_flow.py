"""Tests for the weekly honey flow analyzer."""

from datetime import timedelta, timezone

import pytest

from hivesense.schemas import Reading
from hivesense.services.honey_flow import analyze_honey_flow, daily_yield
from hivesense.utils.timestamps import DAY_MS, HOUR_MS

# 2024-01-01 00:00 UTC, a Monday
MONDAY = 1_704_067_200_000


def _reading(offset_ms, weight):
    return Reading(timestamp=MONDAY + offset_ms, weight=weight)


def test_single_week_gain():
    series = (_reading(0, 30.0), _reading(7 * DAY_MS - 1, 33.0))
    report = analyze_honey_flow(series)
    assert len(report.periods) == 1
    period = report.periods[0]
    assert period.period_key == "2024-01-01"
    assert period.gain_kg == 3.0
    assert period.efficiency_kg_per_day == pytest.approx(3 / 7, abs=1e-3)
    assert report.total_gain_kg == 3.0
    assert report.average_gain_kg == 3.0
    assert report.peak_gain_kg == 3.0


def test_sunday_belongs_to_preceding_week():
    # 2024-01-07 is a Sunday
    series = (_reading(0, 30.0), _reading(6 * DAY_MS + 12 * HOUR_MS, 31.5))
    report = analyze_honey_flow(series)
    assert [p.period_key for p in report.periods] == ["2024-01-01"]


def test_readings_a_full_week_apart_land_in_different_weeks():
    series = (_reading(0, 30.0), _reading(7 * DAY_MS, 33.0))
    report = analyze_honey_flow(series)
    assert report.periods == ()
    assert report.average_gain_kg is None
    assert report.total_gain_kg == 0
    assert report.peak_gain_kg == 0


def test_multiple_weeks_aggregates():
    series = (
        _reading(0, 30.0),
        _reading(4 * DAY_MS, 32.0),
        _reading(7 * DAY_MS, 32.0),
        _reading(9 * DAY_MS, 31.0),
    )
    report = analyze_honey_flow(series)
    assert [p.period_key for p in report.periods] == ["2024-01-01", "2024-01-08"]
    assert [p.gain_kg for p in report.periods] == [2.0, -1.0]
    assert report.periods[0].efficiency_kg_per_day == 0.5
    assert report.periods[1].efficiency_kg_per_day == -0.5
    assert report.total_gain_kg == 1.0
    assert report.average_gain_kg == 0.5
    assert report.peak_gain_kg == 2.0


def test_peak_never_negative():
    series = (_reading(0, 33.0), _reading(DAY_MS, 31.0))
    report = analyze_honey_flow(series)
    assert report.total_gain_kg == -2.0
    assert report.average_gain_kg == -2.0
    assert report.peak_gain_kg == 0


def test_same_timestamp_has_zero_efficiency():
    series = (_reading(0, 30.0), _reading(0, 30.4))
    report = analyze_honey_flow(series)
    assert report.periods[0].gain_kg == 0.4
    assert report.periods[0].efficiency_kg_per_day == 0


def test_unsorted_input_is_sorted_first():
    series = (_reading(3 * DAY_MS, 34.0), _reading(DAY_MS, 30.0))
    report = analyze_honey_flow(series)
    assert report.periods[0].gain_kg == 4.0
    assert report.periods[0].efficiency_kg_per_day == 2.0


def test_single_point_weeks_skipped():
    series = (_reading(0, 30.0), _reading(DAY_MS, 31.0), _reading(8 * DAY_MS, 35.0))
    report = analyze_honey_flow(series)
    assert len(report.periods) == 1
    assert report.periods[0].period_key == "2024-01-01"


def test_unweighed_readings_do_not_count():
    series = (
        _reading(0, 30.0),
        _reading(DAY_MS, None),
        _reading(2 * DAY_MS, 0.0),
    )
    report = analyze_honey_flow(series)
    assert report.periods == ()


def test_fewer_than_two_readings_is_empty():
    for series in ((), (_reading(0, 30.0),)):
        report = analyze_honey_flow(series)
        assert report.is_empty
        assert report.periods == ()
        assert report.total_gain_kg is None
        assert report.average_gain_kg is None
        assert report.peak_gain_kg is None


def test_week_boundary_follows_timezone():
    # Sunday 23:00 UTC is Monday 01:00 at UTC+2
    plus_two = timezone(timedelta(hours=2))
    series = (_reading(0, 30.0), _reading(6 * DAY_MS + 23 * HOUR_MS, 31.0))
    assert len(analyze_honey_flow(series).periods) == 1
    assert analyze_honey_flow(series, tz=plus_two).periods == ()


# Daily yield
def test_daily_yield_counts_gains_only():
    series = (
        _reading(0, 30.0),
        _reading(DAY_MS, 30.75),
        _reading(2 * DAY_MS, 30.25),
        _reading(3 * DAY_MS, 31.0),
    )
    report = daily_yield(series)
    assert [d.yield_kg for d in report.daily] == [0.75, 0, 0.75]
    assert [d.timestamp for d in report.daily] == [MONDAY + i * DAY_MS for i in (1, 2, 3)]
    assert report.total_kg == 1.5


def test_daily_yield_drop_is_zero_not_negative():
    report = daily_yield((_reading(0, 33.0), _reading(DAY_MS, 31.0)))
    assert report.daily[0].yield_kg == 0
    assert report.total_kg == 0


def test_daily_yield_skips_pairs_with_missing_weight():
    series = (
        _reading(0, 30.0),
        _reading(DAY_MS, None),
        _reading(2 * DAY_MS, 31.0),
        _reading(3 * DAY_MS, 0.0),
    )
    report = daily_yield(series)
    assert report.daily == ()
    assert report.total_kg == 0


def test_daily_yield_sorts_input():
    report = daily_yield((_reading(DAY_MS, 32.0), _reading(0, 30.0)))
    assert report.daily[0].yield_kg == 2.0
    assert report.daily[0].timestamp == MONDAY + DAY_MS


def test_daily_yield_needs_two_readings():
    for series in ((), (_reading(0, 30.0),)):
        report = daily_yield(series)
        assert report.daily == ()
        assert report.total_kg is None
