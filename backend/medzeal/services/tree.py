"""Tolerant readers for raw store trees.

Snapshots are plain JSON written by several frontends over time. These helpers
read them without trusting shape: a missing node is empty, a missing number is 0.
"""

import math
from datetime import date, datetime, tzinfo
from typing import Any, Dict, Optional, Union


def as_dict(node: Any) -> Dict[str, Any]:
    """Children of a node keyed by string id; scalars and null have none."""
    if isinstance(node, dict):
        return dict(node)
    # The database returns a list when child keys are 0..n
    if isinstance(node, list):
        return {str(i): v for i, v in enumerate(node) if v is not None}
    return {}


def number(value: Any, default: Union[int, float] = 0) -> Union[int, float]:
    """Numeric field value; numeric strings are accepted, anything else is `default`."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else default
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return default
        if not math.isfinite(parsed):
            return default
        return int(parsed) if parsed.is_integer() else parsed
    return default


def text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def calendar_date(value: Any, tz: tzinfo) -> Optional[date]:
    """
    Calendar day of an ISO-8601 date or timestamp.

    Plain dates ("2024-01-01") and naive timestamps are taken as written; an
    aware timestamp ("...T18:30:00.000Z") is converted to `tz` first.
    Returns None when the value is not parseable.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(tz)
    return parsed.date()
