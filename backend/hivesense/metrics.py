"""Prometheus metrics definitions.

Metrics are defined as module-level singletons so that any module can
import and increment them.
"""

from __future__ import annotations

from prometheus_client import Counter, start_http_server

# --- Reading source ---
source_fetches = Counter(
    "hivesense_source_fetches_total",
    "Reading series resolved, by provenance",
    labelnames=["provenance"],
)
source_failures = Counter(
    "hivesense_source_failures_total",
    "Telemetry feed failures that fell back to synthetic data",
    labelnames=["reason"],
)

# --- Alerts ---
alerts_fired = Counter(
    "hivesense_alerts_fired_total",
    "Alerts accepted by the threshold alert engine",
    labelnames=["sensor"],
)
alerts_deduplicated = Counter(
    "hivesense_alerts_deduplicated_total",
    "Alert proposals discarded because an unread duplicate exists",
    labelnames=["sensor"],
)


def start_metrics_server(port: int) -> None:
    """Expose the default registry on :port/metrics."""
    start_http_server(port)
