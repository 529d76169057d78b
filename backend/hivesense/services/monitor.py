"""Hive monitor: fetches every hive's readings concurrently and evaluates alerts per hive.

Fetches run as one task per hive, each bounded by FETCH_TIMEOUT_SEC; a slow
or failing hive degrades to fallback data without holding up the others.
Alert evaluation for a hive runs under that hive's lock so the
snapshot -> evaluate -> append sequence cannot interleave with another
evaluation of the same hive.
"""

import asyncio
import logging
import random
import uuid
from typing import Protocol

from hivesense import metrics
from hivesense.config import Settings
from hivesense.schemas import (
    Alert,
    AlertSettings,
    Hive,
    HiveReport,
    Provenance,
    Reading,
    TimeSeries,
)
from hivesense.services.alert_engine import AlertEngine
from hivesense.services.health import score_colony_health
from hivesense.services.honey_flow import analyze_honey_flow, daily_yield
from hivesense.services.recommendations import build_recommendations
from hivesense.services.simulator import generate_series, synthetic_length
from hivesense.services.source import ThingSpeakClient, resolve_readings
from hivesense.services.statistics import calculate_all_stats
from hivesense.services.swarm import assess_swarm_risk
from hivesense.services.trends import weekly_trends
from hivesense.services.windows import filter_window

logger = logging.getLogger(__name__)


# ---- Persistence collaborators ----


class AlertStore(Protocol):
    async def list_alerts(self) -> list[Alert]: ...

    async def append_alert(self, alert: Alert) -> None: ...

    async def mark_read(self, alert: Alert) -> Alert: ...


class HiveStore(Protocol):
    async def list_hives(self) -> list[Hive]: ...

    async def add_hive(self, name: str) -> Hive: ...

    async def soft_delete_hive(self, hive_id: str) -> None: ...


class InMemoryAlertStore:
    """Process-local AlertStore; newest alerts are listed first."""

    def __init__(self, alerts: list[Alert] | None = None) -> None:
        self._alerts: list[Alert] = list(alerts or [])

    async def list_alerts(self) -> list[Alert]:
        return sorted(self._alerts, key=lambda a: a.timestamp, reverse=True)

    async def append_alert(self, alert: Alert) -> None:
        self._alerts.append(alert)

    async def mark_read(self, alert: Alert) -> Alert:
        for i, stored in enumerate(self._alerts):
            if stored == alert:
                self._alerts[i] = stored.mark_read()
                return self._alerts[i]
        raise KeyError("Alert not found")


class InMemoryHiveStore:
    """Process-local HiveStore; deleted hives are kept but hidden from list_hives()."""

    def __init__(self, hives: list[Hive] | None = None) -> None:
        self._hives: dict[str, Hive] = {h.id: h for h in hives or []}

    async def list_hives(self) -> list[Hive]:
        return [h for h in self._hives.values() if not h.deleted]

    async def add_hive(self, name: str) -> Hive:
        hive = Hive(id=uuid.uuid4().hex, name=name)
        self._hives[hive.id] = hive
        return hive

    async def soft_delete_hive(self, hive_id: str) -> None:
        hive = self._hives.get(hive_id)
        if hive is None:
            raise KeyError(f"Hive {hive_id!r} not found")
        self._hives[hive_id] = hive.model_copy(update={"deleted": True})


# ---- Reports ----


def build_hive_report(
    hive: Hive,
    series: TimeSeries,
    provenance: Provenance,
    period_key: str,
    *,
    new_alerts: list[Alert] | None = None,
    now: int | None = None,
) -> HiveReport:
    """Run every analytic over one hive's series.

    Health and swarm risk look at the most recent readings of the full series;
    statistics, honey flow, yield and trends use the selected window.
    """
    window = filter_window(series, period_key, now=now)
    health = score_colony_health(series)
    swarm_risk = assess_swarm_risk(series)
    honey_flow = analyze_honey_flow(window)
    return HiveReport(
        hive=hive,
        provenance=provenance,
        period_key=period_key,
        reading_count=len(window),
        latest=series[-1] if series else None,
        stats=calculate_all_stats(window),
        health=health,
        swarm_risk=swarm_risk,
        honey_flow=honey_flow,
        honey_yield=daily_yield(window),
        weekly_trends=weekly_trends(window),
        recommendations=build_recommendations(health, swarm_risk, honey_flow),
        new_alerts=list(new_alerts or []),
    )


# ---- Monitor ----


class HiveMonitor:
    def __init__(
        self,
        settings: Settings,
        alert_settings: AlertSettings,
        alert_store: AlertStore,
        hive_store: HiveStore,
        *,
        client: ThingSpeakClient | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings
        self.engine = AlertEngine(alert_settings)
        self.alert_store = alert_store
        self.hive_store = hive_store
        self.client = client or ThingSpeakClient(
            base_url=settings.THINGSPEAK_BASE_URL,
            timeout_seconds=settings.FETCH_TIMEOUT_SEC,
        )
        self.rng = rng
        self._locks: dict[str, asyncio.Lock] = {}

    async def _resolve(self, hive: Hive, count: int) -> tuple[str, TimeSeries, Provenance]:
        try:
            series, provenance = await asyncio.wait_for(
                resolve_readings(
                    self.settings.credentials,
                    count,
                    client=self.client,
                    demo_channel_id=self.settings.DEMO_CHANNEL_ID,
                    demo_api_key=self.settings.DEMO_API_KEY,
                    rng=self.rng,
                ),
                timeout=self.settings.FETCH_TIMEOUT_SEC,
            )
        except TimeoutError:
            logger.warning(
                "Fetch for hive %s timed out after %.1fs, using fallback data",
                hive.id,
                self.settings.FETCH_TIMEOUT_SEC,
            )
            metrics.source_failures.labels(reason="timeout").inc()
            metrics.source_fetches.labels(provenance=Provenance.FALLBACK).inc()
            series = generate_series(synthetic_length(count), rng=self.rng)
            provenance = Provenance.FALLBACK
        return hive.id, series, provenance

    async def fetch_all(
        self, hives: list[Hive], count: int
    ) -> dict[str, tuple[TimeSeries, Provenance]]:
        """Resolve every hive's series concurrently, collecting results as they complete."""
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        results: dict[str, tuple[TimeSeries, Provenance]] = {}
        for next_done in asyncio.as_completed([self._resolve(h, count) for h in hives]):
            hive_id, series, provenance = await next_done
            results[hive_id] = (series, provenance)
        return results

    async def latest_readings(self, hives: list[Hive]) -> dict[str, Reading | None]:
        """Latest reading per hive, as shown on the dashboard cards."""
        resolved = await self.fetch_all(hives, 1)
        return {hive_id: (series[-1] if series else None) for hive_id, (series, _) in resolved.items()}

    async def evaluate_hive(self, hive: Hive, series: TimeSeries) -> list[Alert]:
        lock = self._locks.setdefault(hive.id, asyncio.Lock())
        async with lock:
            existing = await self.alert_store.list_alerts()
            new_alerts = self.engine.evaluate(hive, series, existing)
            for alert in new_alerts:
                await self.alert_store.append_alert(alert)
        return new_alerts

    async def run_cycle(
        self, period_key: str | None = None, count: int | None = None
    ) -> list[HiveReport]:
        """Fetch, evaluate and report on every active hive. Reports follow hive order."""
        period_key = period_key or self.settings.DEFAULT_PERIOD
        count = self.settings.FETCH_RESULTS if count is None else count
        hives = await self.hive_store.list_hives()
        resolved = await self.fetch_all(hives, count)

        alert_batches = await asyncio.gather(
            *(self.evaluate_hive(h, resolved[h.id][0]) for h in hives)
        )

        reports = []
        for hive, new_alerts in zip(hives, alert_batches):
            series, provenance = resolved[hive.id]
            reports.append(
                build_hive_report(hive, series, provenance, period_key, new_alerts=new_alerts)
            )
        logger.info(
            "Cycle complete: %d hive(s), %d new alert(s)",
            len(reports),
            sum(len(r.new_alerts) for r in reports),
        )
        return reports
