"""Normalization helpers.

Centralizes defensive parsing of server values so the models and the
classifier can degrade instead of failing on odd payloads.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any

# Sentinel strings the CAN health API uses for "not available".
SENTINELS = frozenset({"", "--", "N/A", "NaN", "nan", "null"})

# Threshold to distinguish epoch seconds from milliseconds.
_MS_THRESHOLD = 1e11


def is_sentinel(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and value.strip() in SENTINELS:
        return True
    return isinstance(value, float) and math.isnan(value)


def safe_float(value: Any) -> float | None:
    if is_sentinel(value) or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def non_negative_int(value: Any) -> int | None:
    """Parse a count; negative numbers are treated as unknown."""
    parsed = safe_int(value)
    if parsed is None or parsed < 0:
        return None
    return parsed


def safe_str(value: Any) -> str | None:
    if is_sentinel(value):
        return None
    text = str(value).strip()
    return text if text else None


def parse_timestamp(value: Any) -> datetime | None:
    """Convert a server timestamp to an aware UTC datetime.

    Accepts ISO-8601 strings (a trailing ``Z`` included; naive values are
    taken as UTC), epoch seconds and epoch milliseconds.  Anything else
    returns ``None``.
    """
    if is_sentinel(value) or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, (int, float)):
        ts = float(value)
        if ts <= 0:
            return None
        if ts > _MS_THRESHOLD:
            ts /= 1000.0
        return datetime.fromtimestamp(ts, tz=UTC)
    if isinstance(value, str):
        text = value.strip()
        numeric = safe_float(text)
        if numeric is not None:
            return parse_timestamp(numeric)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
    return None
