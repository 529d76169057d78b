"""Colony health score from the last two weeks of readings.

Starts from 100 and deducts per failing factor:
- Brood temperature mean outside 32-36C: -20
- Weight trend (second half vs first half mean) below -1kg: -15
- Humidity mean outside 50-70%: -10
- Minimum battery voltage below 3.6V: -5
"""

from hivesense.schemas import HealthAssessment, HealthStatus, TimeSeries
from hivesense.services.statistics import eligible_values

HEALTH_WINDOW = 14
MIN_TREND_POINTS = 7

BROOD_RANGE_C = (32.0, 36.0)
HUMIDITY_RANGE_PCT = (50.0, 70.0)
WEIGHT_GAIN_KG = 0.5
WEIGHT_LOSS_KG = -1.0
LOW_BATTERY_V = 3.6

BROOD_DEDUCTION = 20
WEIGHT_DEDUCTION = 15
HUMIDITY_DEDUCTION = 10
BATTERY_DEDUCTION = 5


def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


def _status_for(score: int) -> HealthStatus:
    if score < 60:
        return HealthStatus.POOR
    if score < 75:
        return HealthStatus.FAIR
    if score < 90:
        return HealthStatus.GOOD
    return HealthStatus.EXCELLENT


def _brood_factor(recent: TimeSeries) -> tuple[int, str]:
    temps = eligible_values(recent, "broodTemperature")
    if not temps:
        return 0, "No brood temperature data available."
    avg = _mean(temps)
    low, high = BROOD_RANGE_C
    if avg < low or avg > high:
        return (
            BROOD_DEDUCTION,
            f"Brood temperature ({avg:.1f}°C) is outside optimal range ({low:g}-{high:g}°C).",
        )
    return 0, f"Brood temperature ({avg:.1f}°C) is optimal."


def _weight_factor(recent: TimeSeries) -> tuple[int, str]:
    weights = eligible_values(recent, "weight")
    if len(weights) < MIN_TREND_POINTS:
        return 0, "Insufficient weight data for trend analysis."
    half = len(weights) // 2
    trend = _mean(weights[half:]) - _mean(weights[:half])
    if trend > WEIGHT_GAIN_KG:
        return 0, "Positive weight gain trend detected."
    if trend < WEIGHT_LOSS_KG:
        return WEIGHT_DEDUCTION, "Concerning weight loss trend detected."
    return 0, "Stable weight trend."


def _humidity_factor(recent: TimeSeries) -> tuple[int, str]:
    levels = eligible_values(recent, "humidity")
    if not levels:
        return 0, "No humidity data available."
    avg = _mean(levels)
    low, high = HUMIDITY_RANGE_PCT
    if avg < low or avg > high:
        return (
            HUMIDITY_DEDUCTION,
            f"Humidity ({avg:.1f}%) is outside optimal range ({low:g}-{high:g}%).",
        )
    return 0, f"Humidity ({avg:.1f}%) is optimal."


def _battery_factor(recent: TimeSeries) -> tuple[int, str]:
    voltages = eligible_values(recent, "batteryVoltage")
    if not voltages:
        return 0, "No battery voltage data available."
    lowest = min(voltages)
    if lowest < LOW_BATTERY_V:
        return BATTERY_DEDUCTION, f"Low battery voltage detected ({lowest:.2f}V). Consider charging."
    return 0, f"Battery voltage ({lowest:.2f}V) is healthy."


def score_colony_health(series: TimeSeries) -> HealthAssessment:
    """Score the most recent HEALTH_WINDOW readings (fewer if that is all there is)."""
    if not series:
        return HealthAssessment(
            score=None,
            status=HealthStatus.UNKNOWN,
            factors=("No data to assess health.",),
        )

    recent = tuple(series[-HEALTH_WINDOW:])
    deductions = 0
    factors = []
    # Order is part of the contract: brood, weight, humidity, battery
    for check in (_brood_factor, _weight_factor, _humidity_factor, _battery_factor):
        deduction, finding = check(recent)
        deductions += deduction
        factors.append(finding)

    score = max(0, 100 - deductions)
    return HealthAssessment(score=score, status=_status_for(score), factors=tuple(factors))
