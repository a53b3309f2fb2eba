"""Time boundary parsing and snowflake cursor conversion."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional
import re

from discord_mcp.errors import InvalidTimeFormatError


DISCORD_EPOCH_MS = 1420070400000
_TIMESTAMP_SHIFT = 22
_RELATIVE_PATTERN = re.compile(r"^(\d+)(h|d|m)$")
_RELATIVE_UNITS = {
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "m": timedelta(minutes=1),
}
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

INVALID_TIME_FORMAT_MESSAGE = (
    'Invalid time format. Use ISO 8601 (e.g., "2024-01-01T00:00:00Z") '
    'or relative time (e.g., "1h", "24h", "7d")'
)


def parse_boundary(text: str, *, now: Optional[datetime] = None) -> datetime:
    """Parse ``30m``/``24h``/``7d`` relative to now, or an ISO 8601 instant.

    Naive ISO values are read as UTC. The result is always UTC-aware.
    """

    value = text.strip()
    match = _RELATIVE_PATTERN.fullmatch(value)
    if match:
        reference = now if now is not None else datetime.now(timezone.utc)
        count = int(match.group(1))
        try:
            return _as_utc(reference) - count * _RELATIVE_UNITS[match.group(2)]
        except OverflowError as exc:
            raise InvalidTimeFormatError(INVALID_TIME_FORMAT_MESSAGE) from exc

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise InvalidTimeFormatError(INVALID_TIME_FORMAT_MESSAGE) from exc
    try:
        return _as_utc(parsed)
    except OverflowError as exc:
        # The offset pushes the instant outside the representable UTC range.
        raise InvalidTimeFormatError(INVALID_TIME_FORMAT_MESSAGE) from exc


def instant_to_cursor(instant: datetime) -> int:
    """Synthesize the smallest snowflake id for the millisecond of ``instant``.

    Instants before the platform epoch clamp to 0.
    """

    elapsed_ms = _epoch_millis(instant) - DISCORD_EPOCH_MS
    if elapsed_ms < 0:
        return 0
    return elapsed_ms << _TIMESTAMP_SHIFT


def cursor_to_instant(snowflake: int) -> datetime:
    millis = (snowflake >> _TIMESTAMP_SHIFT) + DISCORD_EPOCH_MS
    return _EPOCH + timedelta(milliseconds=millis)


def scan_cursor(since: datetime) -> int:
    """Cursor for "messages after" queries that still includes messages created at ``since``."""

    try:
        boundary = since - timedelta(milliseconds=1)
    except OverflowError:
        # datetime.min is long before the platform epoch.
        return 0
    return instant_to_cursor(boundary)


def _epoch_millis(instant: datetime) -> int:
    # timedelta arithmetic stays in integers; timestamp() would go through float.
    delta = _as_utc(instant) - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
