"""
Time codec: conversions between raw seconds and the rundown display formats.

Three formats are in use:
  - clock duration   ``M:SS`` / ``M:SS.CC``  (est / actual / cume durations)
  - time of day      ``HH:MM:SS``            (front times)
  - start-time text  ``HH:MM`` / ``HH:MM:SS`` / ``MM:SS``

None of these functions raise. Zero, ``None``, ``NaN``, negative and unparseable
input all mean "no time" and produce the zero representation.
"""
import math
from typing import Any

Number = int | float

ZERO_DURATION = "0:00"
ZERO_TIME_OF_DAY = "00:00:00"


def _as_seconds(value: Any) -> float | None:
    """Return a usable positive number of seconds, or None for "no time"."""
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(seconds) or math.isinf(seconds) or seconds <= 0:
        return None
    return seconds


def _normalize(value: float) -> Number:
    if value < 0 or math.isnan(value):
        return 0
    return int(value) if value.is_integer() else value


def _to_float(text: str) -> float | None:
    try:
        value = float(text.strip())
    except ValueError:
        return None
    return None if math.isnan(value) or math.isinf(value) else value


def seconds_to_clock_duration(total_seconds: Any) -> str:
    """Format seconds as ``M:SS``, adding ``.CC`` only when centiseconds are non-zero.

    >>> seconds_to_clock_duration(90)
    '1:30'
    >>> seconds_to_clock_duration(90.5)
    '1:30.50'
    """
    seconds = _as_seconds(total_seconds)
    if seconds is None:
        return ZERO_DURATION

    # Work in whole centiseconds so 59.999 rolls over to 1:00 instead of 0:59.100
    total_centis = round(seconds * 100)
    mins, rem = divmod(total_centis, 6000)
    secs, centis = divmod(rem, 100)
    if centis:
        return f"{mins}:{secs:02d}.{centis:02d}"
    return f"{mins}:{secs:02d}"


def seconds_to_time_of_day(total_seconds: Any) -> str:
    """Format seconds since midnight as ``HH:MM:SS``. Hours are not wrapped at 24."""
    seconds = _as_seconds(total_seconds)
    if seconds is None:
        return ZERO_TIME_OF_DAY

    whole = int(seconds)
    hours, rem = divmod(whole, 3600)
    mins, secs = divmod(rem, 60)
    return f"{hours:02d}:{mins:02d}:{secs:02d}"


def parse_time_of_day_to_seconds(text: str | None) -> Number:
    """Parse ``HH:MM:SS``, ``HH:MM`` or ``MM:SS`` into seconds.

    A two-part value whose first component is 24 or more cannot be an hour, so it
    is read as ``MM:SS``: ``"19:30"`` is 70200 but ``"90:30"`` is 5430.
    """
    if not text or not isinstance(text, str):
        return 0

    parts = [_to_float(p) for p in text.split(":")]
    if any(p is None for p in parts):
        return 0

    if len(parts) == 3:
        hours, mins, secs = parts
        return _normalize(hours * 3600 + mins * 60 + secs)
    if len(parts) == 2:
        first, second = parts
        if first >= 24:
            return _normalize(first * 60 + second)
        return _normalize(first * 3600 + second * 60)
    return 0


def parse_clock_duration_to_seconds(text: str | None) -> Number:
    """Parse ``M:SS`` / ``M:SS.cc`` into seconds. Text without a colon is already seconds."""
    if not text or not isinstance(text, str):
        return 0

    if ":" not in text:
        return _normalize(_to_float(text) or 0.0)

    min_part, sec_part = text.split(":")[:2]
    if not sec_part.strip():
        return _normalize(_to_float(min_part) or 0.0)

    mins = _to_float(min_part) or 0.0
    secs = _to_float(sec_part) or 0.0
    return _normalize(math.trunc(mins) * 60 + secs)
