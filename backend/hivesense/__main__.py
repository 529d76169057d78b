"""Entry point: python -m hivesense [report|monitor|latest] [period]"""

import asyncio
import json
import sys

import structlog

from hivesense.config import Settings
from hivesense.logging_config import configure_logging
from hivesense.schemas import AlertSettings, Hive
from hivesense.services.monitor import HiveMonitor, InMemoryAlertStore, InMemoryHiveStore
from hivesense.services.windows import PERIOD_DURATIONS_MS, fetch_count_for_period
from hivesense.utils.timestamps import ms_to_iso, utc_now


def _build_monitor(settings: Settings) -> HiveMonitor:
    names = settings.HIVES or ["Hive 1"]
    hives = [Hive(id=str(i), name=name) for i, name in enumerate(names, start=1)]
    return HiveMonitor(
        settings,
        AlertSettings.defaults(),
        InMemoryAlertStore(),
        InMemoryHiveStore(hives),
    )


def run_report(settings: Settings, period_key: str) -> None:
    monitor = _build_monitor(settings)
    reports = asyncio.run(monitor.run_cycle(period_key, fetch_count_for_period(period_key)))
    print(
        json.dumps(
            {
                "generated_at": utc_now(),
                "reports": [r.model_dump(mode="json") for r in reports],
            },
            indent=2,
        )
    )


def run_monitor(settings: Settings) -> None:
    log = structlog.get_logger()
    if settings.METRICS_PORT:
        from hivesense.metrics import start_metrics_server

        start_metrics_server(settings.METRICS_PORT)
        log.info("metrics exporter started", port=settings.METRICS_PORT)

    monitor = _build_monitor(settings)
    reports = asyncio.run(monitor.run_cycle())
    for report in reports:
        log.info(
            "hive evaluated",
            hive=report.hive.name,
            provenance=report.provenance,
            health=report.health.score,
            swarm_risk=report.swarm_risk.risk_level,
        )
        for alert in report.new_alerts:
            print(
                f"[{ms_to_iso(alert.timestamp)}] {alert.hive_name}: {alert.sensor} "
                f"{alert.comparison_type} {alert.threshold} (actual: {alert.actual_value})"
            )


def run_latest(settings: Settings) -> None:
    monitor = _build_monitor(settings)

    async def _latest():
        hives = await monitor.hive_store.list_hives()
        return hives, await monitor.latest_readings(hives)

    hives, latest = asyncio.run(_latest())
    for hive in hives:
        reading = latest.get(hive.id)
        if reading is None:
            print(f"{hive.name}: no data")
        else:
            print(f"{hive.name}: {reading.model_dump_json()}")


def main():
    command = sys.argv[1] if len(sys.argv) > 1 else "report"
    settings = Settings()
    # report and latest write their output to stdout, so logs go to stderr
    log_stream = sys.stderr if command in ("report", "latest") else sys.stdout
    configure_logging(command, settings.LOG_LEVEL, stream=log_stream)

    if command == "report":
        period_key = sys.argv[2] if len(sys.argv) > 2 else settings.DEFAULT_PERIOD
        if period_key not in PERIOD_DURATIONS_MS:
            print(f"Unknown period: {period_key}")
            print(f"Periods: {', '.join(PERIOD_DURATIONS_MS)}")
            sys.exit(1)
        run_report(settings, period_key)
    elif command == "monitor":
        run_monitor(settings)
    elif command == "latest":
        run_latest(settings)
    else:
        print(f"Unknown command: {command}")
        print("Usage: python -m hivesense [report [period]|monitor|latest]")
        sys.exit(1)


if __name__ == "__main__":
    main()
