"""Recency windows over a reading series."""

from hivesense.schemas import TimeSeries
from hivesense.utils.timestamps import DAY_MS, now_ms

# None = unbounded
PERIOD_DURATIONS_MS: dict[str, int | None] = {
    "today": DAY_MS,
    "3days": 3 * DAY_MS,
    "7days": 7 * DAY_MS,
    "30days": 30 * DAY_MS,
    "all": None,
    "custom": None,
}

# Results to request from the feed so the window is covered at hourly resolution
_FETCH_COUNTS = {
    "today": 24,
    "3days": 3 * 24,
    "7days": 7 * 24,
    "30days": 30 * 24,
    "all": 8000,
    "custom": 8000,
}


def _duration(period_key: str) -> int | None:
    try:
        return PERIOD_DURATIONS_MS[period_key]
    except KeyError:
        raise ValueError(
            f"Unsupported period {period_key!r}; expected one of {', '.join(PERIOD_DURATIONS_MS)}"
        ) from None


def filter_window(series: TimeSeries, period_key: str, *, now: int | None = None) -> TimeSeries:
    """Keep readings whose age (now - timestamp) is within the period.

    `now` is sampled once so every reading is judged against the same cutoff.
    """
    duration = _duration(period_key)
    if duration is None:
        return tuple(series)
    if now is None:
        now = now_ms()
    return tuple(r for r in series if now - r.timestamp <= duration)


def fetch_count_for_period(period_key: str) -> int:
    _duration(period_key)
    return _FETCH_COUNTS[period_key]
