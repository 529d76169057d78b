"""Per-sensor min/max/average over a reading series.

A zero reading on some sensors almost always means the sample was dropped
(an unpowered load cell reports 0 kg, a browned-out ADC reports 0 V), so
those sensors only count strictly positive values. Temperatures outside
the brood nest can legitimately be zero or negative and are kept.
"""

import math

from hivesense.schemas import SENSOR_FIELDS, SensorStats, TimeSeries, sensor_attribute

POSITIVE_ONLY_FIELDS = frozenset({"weight", "broodTemperature", "batteryVoltage", "humidity"})


def is_eligible(sensor_key: str, value: float | None) -> bool:
    if value is None or isinstance(value, bool):
        return False
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return False
    if sensor_key in POSITIVE_ONLY_FIELDS and value <= 0:
        return False
    return True


def eligible_values(series: TimeSeries, sensor_key: str) -> list[float]:
    """Values of sensor_key in series order, skipping missing and invalid samples."""
    attr = sensor_attribute(sensor_key)
    values = []
    for reading in series:
        value = getattr(reading, attr)
        if is_eligible(sensor_key, value):
            values.append(value)
    return values


def calculate_stats(series: TimeSeries, sensor_key: str) -> SensorStats | None:
    """Return min/max/avg of the eligible values, or None when there are none."""
    values = eligible_values(series, sensor_key)
    if not values:
        return None
    return SensorStats(
        min=min(values),
        max=max(values),
        avg=sum(values) / len(values),
        count=len(values),
    )


def calculate_all_stats(series: TimeSeries) -> dict[str, SensorStats | None]:
    return {key: calculate_stats(series, key) for key in SENSOR_FIELDS}
