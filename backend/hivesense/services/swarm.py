"""Swarm risk from the last seven readings.

Indicators and their weights:
- Net weight change over the window <= -2kg: +30
- Brood temperature range > 3C: +20
- Mean absolute reading-to-reading weight change > 0.5kg: +15

Risk level: score > 40 High, > 20 Medium, otherwise Low.
"""

from hivesense.schemas import RiskAssessment, RiskLevel, TimeSeries
from hivesense.services.statistics import eligible_values, is_eligible

SWARM_WINDOW = 7

WEIGHT_LOSS_KG = -2.0
BROOD_RANGE_C = 3.0
ACTIVITY_KG = 0.5


def _level_for(score: int) -> RiskLevel:
    if score > 40:
        return RiskLevel.HIGH
    if score > 20:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def assess_swarm_risk(series: TimeSeries) -> RiskAssessment:
    if len(series) < SWARM_WINDOW:
        return RiskAssessment(
            risk_level=RiskLevel.UNKNOWN,
            score=0,
            indicators=("Not enough data for accurate assessment.",),
        )

    recent = tuple(series[-SWARM_WINDOW:])
    indicators = []
    score = 0

    first, last = recent[0].weight, recent[-1].weight
    if is_eligible("weight", first) and is_eligible("weight", last):
        if last - first <= WEIGHT_LOSS_KG:
            indicators.append(
                f"Significant recent weight loss detected ({last - first:.2f} kg)."
            )
            score += 30

    brood_temps = eligible_values(recent, "broodTemperature")
    if len(brood_temps) > 1 and max(brood_temps) - min(brood_temps) > BROOD_RANGE_C:
        indicators.append("High brood temperature variance detected.")
        score += 20

    deltas = [
        abs(curr.weight - prev.weight)
        for prev, curr in zip(recent, recent[1:])
        if is_eligible("weight", prev.weight) and is_eligible("weight", curr.weight)
    ]
    if deltas and sum(deltas) / len(deltas) > ACTIVITY_KG:
        indicators.append("Elevated daily weight fluctuations, indicating high activity.")
        score += 15

    if not indicators:
        indicators.append("No immediate swarm risk indicators detected.")

    return RiskAssessment(risk_level=_level_for(score), score=score, indicators=tuple(indicators))
