"""Pydantic v2 models for hive telemetry, analytics results and alerts."""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field, field_validator

# Sensor key (as used by alert thresholds and the statistics view) -> Reading attribute
SENSOR_FIELDS: dict[str, str] = {
    "weight": "weight",
    "broodTemperature": "brood_temperature",
    "insideTemperature": "inside_temperature",
    "outsideTemperature": "outside_temperature",
    "batteryVoltage": "battery_voltage",
    "humidity": "humidity",
    "dhtTemperature": "dht_temperature",
}

SWARM_SENSOR = "swarmDetection"


def sensor_attribute(sensor_key: str) -> str:
    """Resolve a sensor key to its Reading attribute, failing loudly on unknown keys."""
    try:
        return SENSOR_FIELDS[sensor_key]
    except KeyError:
        raise ValueError(
            f"Unknown sensor key {sensor_key!r}; expected one of {sorted(SENSOR_FIELDS)}"
        ) from None


# --- Readings ---


class Reading(BaseModel):
    model_config = {"frozen": True}

    timestamp: int
    weight: float | None = None
    brood_temperature: float | None = None
    inside_temperature: float | None = None
    outside_temperature: float | None = None
    battery_voltage: float | None = None
    humidity: float | None = None
    dht_temperature: float | None = None
    gps_valid: bool = False

    @field_validator(
        "weight",
        "brood_temperature",
        "inside_temperature",
        "outside_temperature",
        "battery_voltage",
        "humidity",
        "dht_temperature",
    )
    @classmethod
    def drop_non_finite(cls, v: float | None) -> float | None:
        # NaN/inf means the sample was lost, not that it measured something
        if v is None or not math.isfinite(v):
            return None
        return v

    def value(self, sensor_key: str) -> float | None:
        return getattr(self, sensor_attribute(sensor_key))


TimeSeries = tuple[Reading, ...]


def make_series(readings) -> TimeSeries:
    """Build an immutable, ascending-by-timestamp series (stable for equal timestamps)."""
    return tuple(sorted(readings, key=lambda r: r.timestamp))


class Provenance(StrEnum):
    LIVE = "live"
    DEMO = "demo"
    FALLBACK = "fallback"


class Credentials(BaseModel):
    channel_id: str | None = None
    read_api_key: str | None = None

    def is_placeholder(self, demo_channel_id: str, demo_api_key: str) -> bool:
        if not self.channel_id or not self.read_api_key:
            return True
        return self.channel_id == demo_channel_id or self.read_api_key == demo_api_key


# --- Alert configuration ---


class AlertThresholdConfig(BaseModel):
    enabled: bool = False
    comparison_type: Literal["below", "above"]
    value: float

    @field_validator("value")
    @classmethod
    def finite_value(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("threshold value must be a finite number")
        return v


class SwarmDetectionConfig(BaseModel):
    enabled: bool = False
    weight_drop_kg: float = Field(default=5.0, gt=0)
    time_window_hours: float = Field(default=24.0, gt=0)

    @property
    def time_window_ms(self) -> int:
        return int(self.time_window_hours * 60 * 60 * 1000)


class AlertSettings(BaseModel):
    thresholds: dict[str, AlertThresholdConfig] = Field(default_factory=dict)
    swarm_detection: SwarmDetectionConfig = Field(default_factory=SwarmDetectionConfig)

    @field_validator("thresholds")
    @classmethod
    def known_sensors(
        cls, v: dict[str, AlertThresholdConfig]
    ) -> dict[str, AlertThresholdConfig]:
        for key in v:
            sensor_attribute(key)
        return v

    @classmethod
    def defaults(cls) -> AlertSettings:
        """Factory settings: every rule present but disabled."""
        return cls(
            thresholds={
                "weight": AlertThresholdConfig(comparison_type="below", value=20),
                "broodTemperature": AlertThresholdConfig(comparison_type="above", value=38),
                "insideTemperature": AlertThresholdConfig(comparison_type="above", value=35),
                "outsideTemperature": AlertThresholdConfig(comparison_type="below", value=10),
                "batteryVoltage": AlertThresholdConfig(comparison_type="below", value=3.2),
                "humidity": AlertThresholdConfig(comparison_type="above", value=90),
                "dhtTemperature": AlertThresholdConfig(comparison_type="above", value=35),
            },
            swarm_detection=SwarmDetectionConfig(),
        )


# --- Alerts ---


class Alert(BaseModel):
    model_config = {"frozen": True}

    hive_id: str
    hive_name: str
    sensor: str
    comparison_type: Literal["below", "above", "rapid_drop"]
    threshold: float | str
    actual_value: float | str
    timestamp: int
    is_read: bool = False

    def mark_read(self) -> Alert:
        return self.model_copy(update={"is_read": True})


# --- Hives ---


class Hive(BaseModel):
    id: str
    name: str = Field(min_length=1, max_length=64)
    deleted: bool = False


# --- Analytics results ---


class SensorStats(BaseModel):
    model_config = {"frozen": True}

    min: float
    max: float
    avg: float
    count: int


class HealthStatus(StrEnum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"
    UNKNOWN = "Unknown"


class HealthAssessment(BaseModel):
    model_config = {"frozen": True}

    score: int | None = Field(default=None, ge=0, le=100)
    status: HealthStatus
    factors: tuple[str, ...]


class RiskLevel(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    UNKNOWN = "Unknown"


class RiskAssessment(BaseModel):
    model_config = {"frozen": True}

    risk_level: RiskLevel
    score: int
    indicators: tuple[str, ...]


class HoneyFlowPeriod(BaseModel):
    model_config = {"frozen": True}

    period_key: str  # YYYY-MM-DD of the week's Monday
    gain_kg: float
    efficiency_kg_per_day: float


class HoneyFlowReport(BaseModel):
    model_config = {"frozen": True}

    periods: tuple[HoneyFlowPeriod, ...] = ()
    total_gain_kg: float | None = None
    average_gain_kg: float | None = None
    peak_gain_kg: float | None = None

    @property
    def is_empty(self) -> bool:
        return not self.periods


class DailyYield(BaseModel):
    model_config = {"frozen": True}

    timestamp: int
    yield_kg: float = Field(ge=0)


class HoneyYieldReport(BaseModel):
    model_config = {"frozen": True}

    daily: tuple[DailyYield, ...] = ()
    total_kg: float | None = None


class WeeklyTrend(BaseModel):
    """Averages over one block of seven consecutive readings."""

    model_config = {"frozen": True}

    block: int  # 1-based
    start_timestamp: int
    reading_count: int
    avg_weight: float | None = None
    avg_brood_temperature: float | None = None
    avg_humidity: float | None = None


class HiveReport(BaseModel):
    """Everything the dashboard shows for one hive after a fetch cycle."""

    hive: Hive
    provenance: Provenance
    period_key: str
    reading_count: int
    latest: Reading | None
    stats: dict[str, SensorStats | None]
    health: HealthAssessment
    swarm_risk: RiskAssessment
    honey_flow: HoneyFlowReport
    honey_yield: HoneyYieldReport
    weekly_trends: tuple[WeeklyTrend, ...]
    recommendations: tuple[str, ...]
    new_alerts: list[Alert] = Field(default_factory=list)
