"""Tests for the swarm risk assessor."""

from hivesense.schemas import Reading, RiskLevel
from hivesense.services.swarm import assess_swarm_risk
from hivesense.utils.timestamps import DAY_MS

NO_RISK = "No immediate swarm risk indicators detected."


def _series(weights, brood=None, start=0):
    brood = brood if brood is not None else [34.0] * len(weights)
    return tuple(
        Reading(timestamp=start + i * DAY_MS, weight=w, brood_temperature=b)
        for i, (w, b) in enumerate(zip(weights, brood))
    )


def test_steady_weight_loss_single_indicator():
    weights = [35.0, 34.6, 34.2, 33.8, 33.4, 33.0, 32.5]
    result = assess_swarm_risk(_series(weights))
    assert result.score == 30
    assert result.risk_level == RiskLevel.MEDIUM
    assert len(result.indicators) == 1
    assert result.indicators[0].startswith("Significant recent weight loss detected")


def test_weight_loss_boundary_inclusive():
    result = assess_swarm_risk(_series([35.0, 34.8, 34.4, 34.0, 33.6, 33.3, 33.0]))
    assert result.score == 30


def test_weight_loss_just_under_threshold():
    result = assess_swarm_risk(_series([35.0, 34.8, 34.4, 34.0, 33.6, 33.3, 33.1]))
    assert result.score == 0
    assert result.risk_level == RiskLevel.LOW
    assert result.indicators == (NO_RISK,)


def test_brood_temperature_variance():
    brood = [33.0, 33.0, 33.0, 33.0, 33.0, 33.0, 36.5]
    result = assess_swarm_risk(_series([30.0] * 7, brood))
    assert result.score == 20
    assert result.risk_level == RiskLevel.LOW
    assert result.indicators == ("High brood temperature variance detected.",)


def test_brood_range_of_exactly_three_is_stable():
    brood = [33.0, 33.0, 33.0, 33.0, 33.0, 33.0, 36.0]
    assert assess_swarm_risk(_series([30.0] * 7, brood)).score == 0


def test_brood_variance_ignores_missing_values():
    brood = [None, 34.0, None, None, None, None, None]
    assert assess_swarm_risk(_series([30.0] * 7, brood)).score == 0


def test_high_activity():
    weights = [30.0, 31.0, 30.0, 31.0, 30.0, 31.0, 30.0]
    result = assess_swarm_risk(_series(weights))
    assert result.score == 15
    assert result.risk_level == RiskLevel.LOW
    assert result.indicators == ("Elevated daily weight fluctuations, indicating high activity.",)


def test_loss_with_activity_is_high():
    weights = [36.0, 34.0, 35.0, 33.0, 34.0, 32.0, 33.0]
    result = assess_swarm_risk(_series(weights))
    assert result.score == 45
    assert result.risk_level == RiskLevel.HIGH
    assert len(result.indicators) == 2


def test_all_indicators():
    weights = [36.0, 34.0, 35.0, 33.0, 34.0, 32.0, 33.0]
    brood = [32.0, 34.0, 36.0, 34.0, 32.0, 34.0, 35.5]
    result = assess_swarm_risk(_series(weights, brood))
    assert result.score == 65
    assert result.risk_level == RiskLevel.HIGH
    assert len(result.indicators) == 3


def test_medium_threshold():
    # 20 alone is Low, 30 alone is Medium
    brood = [33.0, 33.0, 33.0, 33.0, 33.0, 33.0, 37.0]
    assert assess_swarm_risk(_series([30.0] * 7, brood)).risk_level == RiskLevel.LOW


def test_only_last_seven_readings_count():
    noisy = _series([40.0, 30.0, 40.0, 30.0], brood=[20.0, 40.0, 20.0, 40.0])
    calm = _series([30.0] * 7, start=4 * DAY_MS)
    result = assess_swarm_risk(noisy + calm)
    assert result.score == 0
    assert result.indicators == (NO_RISK,)


def test_insufficient_data():
    result = assess_swarm_risk(_series([30.0] * 6))
    assert result.risk_level == RiskLevel.UNKNOWN
    assert result.score == 0
    assert result.indicators == ("Not enough data for accurate assessment.",)


def test_missing_end_weight_skips_loss_indicator():
    weights = [35.0, 34.8, 34.5, 34.3, 34.0, 33.8, None]
    result = assess_swarm_risk(_series(weights))
    assert result.score == 0
