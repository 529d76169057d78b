"""Synthetic hive telemetry for demo mode and as the fallback when the feed is unavailable."""

import random

from hivesense.schemas import Reading, TimeSeries, make_series
from hivesense.utils.timestamps import DAY_MS, now_ms

DEFAULT_LENGTH = 30

# field -> (low, high); values are drawn uniformly and rounded to 2 decimals
FIELD_RANGES: dict[str, tuple[float, float]] = {
    "weight": (30.0, 40.0),
    "brood_temperature": (32.0, 37.0),
    "inside_temperature": (28.0, 33.0),
    "outside_temperature": (10.0, 25.0),
    "battery_voltage": (3.5, 4.0),
    "humidity": (60.0, 80.0),
    "dht_temperature": (25.0, 30.0),
}


def synthetic_length(requested_count: int) -> int:
    """Points to generate for a request: 0 means DEFAULT_LENGTH, and never more than that."""
    if requested_count <= 0:
        return DEFAULT_LENGTH
    return min(requested_count, DEFAULT_LENGTH)


def generate_series(
    count: int = DEFAULT_LENGTH,
    *,
    now: int | None = None,
    step_ms: int = DAY_MS,
    rng: random.Random | None = None,
) -> TimeSeries:
    """Generate `count` readings, one per `step_ms`, the last one stamped `now`."""
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    if step_ms <= 0:
        raise ValueError(f"step_ms must be positive, got {step_ms}")
    rng = rng or random.Random()
    if now is None:
        now = now_ms()

    readings = []
    for i in range(count):
        values = {
            field: round(rng.uniform(low, high), 2) for field, (low, high) in FIELD_RANGES.items()
        }
        readings.append(
            Reading(
                timestamp=now - (count - 1 - i) * step_ms,
                gps_valid=rng.random() > 0.5,
                **values,
            )
        )
    return make_series(readings)
