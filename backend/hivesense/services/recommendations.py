"""Beekeeping recommendations derived from the health, swarm and honey flow results."""

from hivesense.schemas import HealthAssessment, HoneyFlowReport, RiskAssessment, RiskLevel

HARVEST_GAIN_KG = 5.0

_SWARM_LINES = {
    RiskLevel.LOW: "Low swarm risk",
    RiskLevel.MEDIUM: "Monitor for swarm signs",
    RiskLevel.HIGH: "High swarm risk - inspect soon",
    RiskLevel.UNKNOWN: "Swarm risk unknown - not enough recent readings",
}


def build_recommendations(
    health: HealthAssessment,
    risk: RiskAssessment,
    honey_flow: HoneyFlowReport,
) -> tuple[str, ...]:
    """Return (colony status, honey production, swarm status, recommended action)."""
    if health.score is None:
        status = "Colony health unknown - no readings"
    elif health.score >= 85:
        status = "Colony showing excellent health"
    elif health.score >= 70:
        status = "Colony health is good"
    else:
        status = "Colony needs attention"

    if honey_flow.average_gain_kg is None:
        production = "Weekly honey production: no complete weeks yet"
    else:
        production = f"Weekly honey production: {honey_flow.average_gain_kg:.2f} kg average"

    if risk.risk_level == RiskLevel.HIGH:
        action = "Add supers to prevent swarming"
    elif (honey_flow.total_gain_kg or 0.0) > HARVEST_GAIN_KG:
        action = "Consider honey harvest"
    else:
        action = "Continue regular monitoring"

    return (status, production, _SWARM_LINES[risk.risk_level], action)
