"""Honey flow: net weight gain per Monday-to-Sunday week, and day-over-day yield."""

from datetime import UTC, tzinfo

from hivesense.schemas import (
    DailyYield,
    HoneyFlowPeriod,
    HoneyFlowReport,
    HoneyYieldReport,
    TimeSeries,
    make_series,
)
from hivesense.services.statistics import is_eligible
from hivesense.utils.timestamps import DAY_MS, week_start


def _group_by_week(series: TimeSeries, tz: tzinfo) -> dict[str, list]:
    weeks: dict[str, list] = {}
    for reading in series:
        weeks.setdefault(week_start(reading.timestamp, tz), []).append(reading)
    return weeks


def _week_gain(readings: list) -> tuple[float, float] | None:
    """Return (gain_kg, duration_days) between the first and last weighed reading."""
    weighed = [
        r for r in sorted(readings, key=lambda r: r.timestamp) if is_eligible("weight", r.weight)
    ]
    if len(weighed) < 2:
        return None
    first, last = weighed[0], weighed[-1]
    return last.weight - first.weight, (last.timestamp - first.timestamp) / DAY_MS


def analyze_honey_flow(series: TimeSeries, *, tz: tzinfo = UTC) -> HoneyFlowReport:
    """Bucket readings into weeks and report the net gain of each week.

    Needs at least two readings; otherwise returns an empty report whose
    aggregates are all None. Weeks with fewer than two weighed readings are
    skipped.
    """
    if len(series) < 2:
        return HoneyFlowReport()

    weeks = _group_by_week(make_series(series), tz)

    periods = []
    total = 0.0
    peak = 0.0
    for week_key in sorted(weeks):
        measured = _week_gain(weeks[week_key])
        if measured is None:
            continue
        gain, duration_days = measured
        efficiency = gain / duration_days if duration_days > 0 else 0.0
        periods.append(
            HoneyFlowPeriod(
                period_key=week_key,
                gain_kg=round(gain, 2),
                efficiency_kg_per_day=round(efficiency, 3),
            )
        )
        total += gain
        if gain > peak:
            peak = gain

    return HoneyFlowReport(
        periods=tuple(periods),
        total_gain_kg=round(total, 2),
        average_gain_kg=round(total / len(periods), 2) if periods else None,
        peak_gain_kg=round(peak, 2),
    )


def daily_yield(series: TimeSeries) -> HoneyYieldReport:
    """Weight gained between consecutive readings; a loss counts as no yield.

    Pairs where either weight is missing or invalid are skipped.
    """
    if len(series) < 2:
        return HoneyYieldReport()

    ordered = make_series(series)
    daily = []
    total = 0.0
    for previous, current in zip(ordered, ordered[1:]):
        if not (is_eligible("weight", previous.weight) and is_eligible("weight", current.weight)):
            continue
        gain = current.weight - previous.weight
        if gain > 0:
            total += gain
            daily.append(DailyYield(timestamp=current.timestamp, yield_kg=round(gain, 2)))
        else:
            daily.append(DailyYield(timestamp=current.timestamp, yield_kg=0.0))

    return HoneyYieldReport(daily=tuple(daily), total_kg=round(total, 2))
