"""Alert engine: evaluates a hive's alert settings against a fresh reading series.

Rules:
- Sensor thresholds: the latest reading's value is compared with each enabled
  threshold ("below": actual < value, "above": actual > value).
- Swarm detection (rapid_drop): the latest weight is compared with the most
  recent reading at least `time_window_hours` older; a change of
  -weight_drop_kg or worse fires.

Proposals are de-duplicated against unread alerts for the same hive, sensor,
comparison type and threshold. A swarm alert is only suppressed by an unread
swarm alert younger than the detection window.

The engine reads a snapshot of existing alerts and returns the new ones; it
never mutates the snapshot. Callers must serialize evaluate -> persist per
hive or a concurrent evaluation can pass the duplicate check twice.
"""

import logging

from hivesense import metrics
from hivesense.schemas import SWARM_SENSOR, Alert, AlertSettings, Hive, Reading, TimeSeries
from hivesense.utils.timestamps import now_ms

logger = logging.getLogger(__name__)


class AlertEngine:
    """Evaluates threshold and swarm rules for one user's alert settings."""

    def __init__(self, settings: AlertSettings):
        self.settings = settings

    def evaluate(
        self,
        hive: Hive,
        series: TimeSeries,
        existing_alerts: list[Alert],
        *,
        now: int | None = None,
    ) -> list[Alert]:
        """Run every rule for one evaluation cycle. Returns the newly accepted alerts."""
        if not series:
            return []
        if now is None:
            now = now_ms()

        accepted: list[Alert] = []
        for proposal in self._propose(hive, series, now):
            if self._is_duplicate(proposal, [*existing_alerts, *accepted], now):
                logger.debug(
                    "Skipping duplicate unread alert: hive=%s sensor=%s type=%s",
                    hive.id,
                    proposal.sensor,
                    proposal.comparison_type,
                )
                metrics.alerts_deduplicated.labels(sensor=proposal.sensor).inc()
                continue
            logger.info(
                "Alert fired: hive=%s sensor=%s type=%s threshold=%s actual=%s",
                hive.id,
                proposal.sensor,
                proposal.comparison_type,
                proposal.threshold,
                proposal.actual_value,
            )
            metrics.alerts_fired.labels(sensor=proposal.sensor).inc()
            accepted.append(proposal)
        return accepted

    def _propose(self, hive: Hive, series: TimeSeries, now: int) -> list[Alert]:
        proposals = self._check_thresholds(hive, series[-1], now)
        swarm = self._check_swarm(hive, series, now)
        if swarm is not None:
            proposals.append(swarm)
        return proposals

    # ---- Rule checks ----

    def _check_thresholds(self, hive: Hive, latest: Reading, now: int) -> list[Alert]:
        proposals = []
        for sensor, threshold in self.settings.thresholds.items():
            if not threshold.enabled:
                continue
            actual = latest.value(sensor)
            if actual is None:
                continue
            if threshold.comparison_type == "below":
                triggered = actual < threshold.value
            else:
                triggered = actual > threshold.value
            if triggered:
                proposals.append(
                    Alert(
                        hive_id=hive.id,
                        hive_name=hive.name,
                        sensor=sensor,
                        comparison_type=threshold.comparison_type,
                        threshold=threshold.value,
                        actual_value=actual,
                        timestamp=now,
                    )
                )
        return proposals

    def _check_swarm(self, hive: Hive, series: TimeSeries, now: int) -> Alert | None:
        swarm = self.settings.swarm_detection
        if not swarm.enabled or len(series) < 2:
            return None

        latest = series[-1]
        cutoff = latest.timestamp - swarm.time_window_ms

        # Most recent reading at or before the start of the window
        historical = None
        for reading in reversed(series[:-1]):
            if reading.timestamp <= cutoff:
                historical = reading
                break
        if historical is None or latest.weight is None or historical.weight is None:
            return None

        change = latest.weight - historical.weight
        if change > -swarm.weight_drop_kg:
            return None

        hours = f"{swarm.time_window_hours:g}"
        return Alert(
            hive_id=hive.id,
            hive_name=hive.name,
            sensor=SWARM_SENSOR,
            comparison_type="rapid_drop",
            threshold=f"{swarm.weight_drop_kg:g}kg over {hours}hrs",
            actual_value=f"{change:.2f} kg over {hours} hrs",
            timestamp=now,
        )

    # ---- Shared helpers ----

    def _is_duplicate(self, proposal: Alert, alerts: list[Alert], now: int) -> bool:
        window_ms = self.settings.swarm_detection.time_window_ms
        for alert in alerts:
            if alert.is_read:
                continue
            if (
                alert.hive_id != proposal.hive_id
                or alert.sensor != proposal.sensor
                or alert.comparison_type != proposal.comparison_type
            ):
                continue
            if proposal.comparison_type == "rapid_drop":
                if now - alert.timestamp < window_ms:
                    return True
            elif alert.threshold == proposal.threshold:
                return True
        return False
