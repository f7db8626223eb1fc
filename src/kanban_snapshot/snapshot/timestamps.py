"""
Timestamp conversion between the document and the backend.

Documents carry ISO-8601 UTC strings with millisecond precision; the
backend stores integer nanoseconds since the epoch. The same factor
(NANOS_PER_MILLI) is used in both directions, so sub-millisecond detail
is truncated on export.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from kanban_snapshot.constants import NANOS_PER_MILLI

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MILLI = timedelta(milliseconds=1)


def nanos_to_iso(nanos: int) -> str:
    """
    Format backend nanoseconds as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.

    Raises:
        ValueError: If the moment falls outside years 1 to 9999
    """
    try:
        moment = EPOCH + timedelta(milliseconds=nanos // NANOS_PER_MILLI)
    except OverflowError as e:
        raise ValueError(f"Timestamp {nanos} ns is outside the representable date range") from e
    return (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
        f".{moment.microsecond // 1000:03d}Z"
    )


def iso_to_nanos(value: str) -> int:
    """
    Parse an ISO-8601 string into backend nanoseconds.

    Naive values are read as UTC, date-only values as UTC midnight.

    Raises:
        ValueError: If the value is not a parseable ISO-8601 string
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Not an ISO-8601 timestamp: {value!r}")

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)

    return ((moment - EPOCH) // _ONE_MILLI) * NANOS_PER_MILLI


def utc_now_iso() -> str:
    """Current time in document format."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S") + f".{now.microsecond // 1000:03d}Z"
