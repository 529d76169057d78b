"""Weekly trends: averages over consecutive blocks of seven readings.

Blocks are positional, not calendar weeks. A trailing block with fewer than
three readings is dropped.
"""

from hivesense.schemas import TimeSeries, WeeklyTrend, make_series
from hivesense.services.statistics import eligible_values

BLOCK_SIZE = 7
MIN_BLOCK_READINGS = 3


def _average(block: TimeSeries, sensor_key: str, digits: int) -> float | None:
    values = eligible_values(block, sensor_key)
    if not values:
        return None
    return round(sum(values) / len(values), digits)


def weekly_trends(series: TimeSeries) -> tuple[WeeklyTrend, ...]:
    ordered = make_series(series)
    trends = []
    for start in range(0, len(ordered), BLOCK_SIZE):
        block = ordered[start : start + BLOCK_SIZE]
        if len(block) < MIN_BLOCK_READINGS:
            continue
        trends.append(
            WeeklyTrend(
                block=start // BLOCK_SIZE + 1,
                start_timestamp=block[0].timestamp,
                reading_count=len(block),
                avg_weight=_average(block, "weight", 2),
                avg_brood_temperature=_average(block, "broodTemperature", 1),
                avg_humidity=_average(block, "humidity", 1),
            )
        )
    return tuple(trends)
