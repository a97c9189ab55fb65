"""
Dashboard service selection.

Picks the recent and upcoming services listed on the dashboard from the
raw service-record and upcoming-service lists.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

# Number of records requested from each list endpoint before selection.
FETCH_LIMIT = 100
DEFAULT_LIMIT = 5
UPCOMING_WINDOW_DAYS = 7


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an upstream date or timestamp into a naive UTC datetime.

    Returns None for missing or unparseable values.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def recent_services(records: List[Dict[str, Any]], limit: int = DEFAULT_LIMIT) -> List[Dict[str, Any]]:
    """Return the most recent service records, newest first.

    Records without a readable ``serviceDate`` sort after dated ones.
    """
    if limit < 0:
        raise ValueError("limit must be >= 0")
    dated = [(parse_timestamp(record.get("serviceDate")), record) for record in records]
    dated.sort(key=lambda item: (item[0] is not None, item[0] or datetime.min), reverse=True)
    return [record for _, record in dated[:limit]]


def upcoming_services(
    services: List[Dict[str, Any]],
    now: Optional[datetime] = None,
    limit: int = DEFAULT_LIMIT,
    window_days: int = UPCOMING_WINDOW_DAYS,
) -> List[Dict[str, Any]]:
    """Return services planned between now and ``window_days`` ahead, soonest first.

    Args:
        services: Upcoming-service objects with a ``plannedDate``
        now: Reference time as naive UTC (defaults to the current time)
        limit: Maximum number of services returned
        window_days: Length of the look-ahead window

    Returns:
        Selected services ordered by planned date

    Raises:
        ValueError: If limit or window_days is negative
    """
    if limit < 0:
        raise ValueError("limit must be >= 0")
    if window_days < 0:
        raise ValueError("window_days must be >= 0")

    now = now or datetime.now(timezone.utc).replace(tzinfo=None)
    window_end = now + timedelta(days=window_days)

    planned = []
    for service in services:
        when = parse_timestamp(service.get("plannedDate"))
        if when is not None and now <= when <= window_end:
            planned.append((when, service))
    planned.sort(key=lambda item: item[0])
    return [service for _, service in planned[:limit]]


def vehicle_label(service: Dict[str, Any]) -> str:
    """Format ``brand model - plate`` for a service's vehicle."""
    vehicle = service.get("vehicle") or {}
    name = " ".join(part for part in (vehicle.get("brand"), vehicle.get("model")) if part)
    plate = vehicle.get("plateNo")
    if name and plate:
        return f"{name} - {plate}"
    return name or plate or "-"
