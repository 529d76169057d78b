"""Timestamp utilities: epoch-millisecond clock and ISO 8601 conversions."""

from datetime import UTC, datetime, timedelta, tzinfo

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS


def now_ms() -> int:
    """Return the current UTC time as integer milliseconds since the epoch."""
    return int(datetime.now(UTC).timestamp() * 1000)


def utc_now() -> str:
    """Return current UTC time as canonical ISO 8601 string: YYYY-MM-DDTHH:MM:SS.mmmZ"""
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def parse_iso_ms(value: str) -> int | None:
    """Parse an ISO 8601 timestamp (e.g. ThingSpeak's "2026-02-08T12:00:00Z") to epoch ms.

    Naive timestamps are taken as UTC. Returns None if the string is unparseable.
    """
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, TypeError, AttributeError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return int(dt.timestamp() * 1000)


def ms_to_iso(timestamp_ms: int) -> str:
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def week_start(timestamp_ms: int, tz: tzinfo = UTC) -> str:
    """Return the YYYY-MM-DD key of the Monday starting the week of timestamp_ms.

    Weeks run Monday to Sunday, so a Sunday belongs to the week that began
    six days earlier.
    """
    day = datetime.fromtimestamp(timestamp_ms / 1000, tz=tz)
    monday = day - timedelta(days=day.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0).strftime("%Y-%m-%d")
