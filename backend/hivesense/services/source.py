"""Reading source: live ThingSpeak feed with synthetic demo/fallback data.

The resolver never raises for an unavailable feed. Missing or placeholder
credentials give `demo` data; any feed failure (transport error, non-2xx,
bad JSON, no usable records) gives `fallback` data. Only caller bugs such
as a negative count raise.
"""

import logging
import random

import httpx

from hivesense import metrics
from hivesense.schemas import Credentials, Provenance, Reading, TimeSeries, make_series
from hivesense.services.simulator import generate_series, synthetic_length
from hivesense.utils.timestamps import parse_iso_ms

logger = logging.getLogger(__name__)

THINGSPEAK_BASE_URL = "https://api.thingspeak.com"
DEMO_CHANNEL_ID = "123456"
DEMO_API_KEY = "demo_api_key"

# ThingSpeak fieldN -> Reading attribute (field8 is the GPS fix flag)
_FEED_FIELDS = {
    "field1": "weight",
    "field2": "brood_temperature",
    "field3": "inside_temperature",
    "field4": "outside_temperature",
    "field5": "battery_voltage",
    "field6": "humidity",
    "field7": "dht_temperature",
}


class FeedError(Exception):
    """The telemetry feed could not deliver usable records."""

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason


def _parse_number(raw: object) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def map_feed_record(feed: dict) -> Reading | None:
    """Map one raw feed record to a Reading.

    Returns None when the timestamp or the weight is missing or unparseable;
    other fields become None individually.
    """
    timestamp = parse_iso_ms(feed.get("created_at"))
    if timestamp is None:
        return None
    values = {attr: _parse_number(feed.get(field)) for field, attr in _FEED_FIELDS.items()}
    reading = Reading(
        timestamp=timestamp,
        gps_valid=_parse_number(feed.get("field8")) == 1,
        **values,
    )
    if reading.weight is None:
        return None
    return reading


class ThingSpeakClient:
    """Fetches raw channel feeds from the ThingSpeak read API."""

    def __init__(
        self,
        *,
        base_url: str = THINGSPEAK_BASE_URL,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._transport = transport

    async def fetch_feeds(self, channel_id: str, api_key: str, count: int) -> list[dict]:
        """Return the raw `feeds` list, raising FeedError on any failure."""
        params = {"api_key": api_key}
        if count > 0:
            params["results"] = count
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.get(f"/channels/{channel_id}/feeds.json", params=params)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise FeedError("http_status", f"Feed returned HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise FeedError("transport", f"Feed request failed: {exc!r}") from exc
        except ValueError as exc:
            raise FeedError("malformed", "Feed response is not valid JSON") from exc

        feeds = data.get("feeds") if isinstance(data, dict) else None
        if not isinstance(feeds, list):
            raise FeedError("malformed", "Feed response has no feeds list")
        if not feeds:
            raise FeedError("empty", "Feed returned no records")
        return feeds


def _synthetic(requested_count: int, rng: random.Random | None) -> TimeSeries:
    return generate_series(synthetic_length(requested_count), rng=rng)


async def resolve_readings(
    credentials: Credentials | None,
    requested_count: int,
    *,
    client: ThingSpeakClient | None = None,
    demo_channel_id: str = DEMO_CHANNEL_ID,
    demo_api_key: str = DEMO_API_KEY,
    rng: random.Random | None = None,
) -> tuple[TimeSeries, Provenance]:
    """Resolve a reading series and tag where it came from.

    Synthetic series follow `synthetic_length(requested_count)`: at most
    DEFAULT_LENGTH daily points, with 0 meaning no preference.
    """
    if requested_count < 0:
        raise ValueError(f"requested_count must be >= 0, got {requested_count}")

    if credentials is None or credentials.is_placeholder(demo_channel_id, demo_api_key):
        logger.info("No live credentials configured, using demo data")
        metrics.source_fetches.labels(provenance=Provenance.DEMO).inc()
        return _synthetic(requested_count, rng), Provenance.DEMO

    client = client or ThingSpeakClient()
    try:
        feeds = await client.fetch_feeds(
            credentials.channel_id, credentials.read_api_key, requested_count
        )
        readings = [r for r in (map_feed_record(f) for f in feeds if isinstance(f, dict)) if r]
        if not readings:
            raise FeedError("malformed", "No feed record carried a usable weight")
    except FeedError as exc:
        logger.warning(
            "Telemetry feed unavailable for channel %s (%s), using fallback data",
            credentials.channel_id,
            exc,
        )
        metrics.source_failures.labels(reason=exc.reason).inc()
        metrics.source_fetches.labels(provenance=Provenance.FALLBACK).inc()
        return _synthetic(requested_count, rng), Provenance.FALLBACK

    dropped = len(feeds) - len(readings)
    if dropped:
        logger.warning("Skipped %d feed record(s) without a valid weight", dropped)
    metrics.source_fetches.labels(provenance=Provenance.LIVE).inc()
    return make_series(readings), Provenance.LIVE
