"""UTC timestamp helpers shared by entity hydration."""

import re
from datetime import datetime, timedelta, timezone

STORAGE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_DISPLAY_FORMAT = "%b %d, %y %I:%M%p"

_UNITS = {
    "sec": "seconds",
    "second": "seconds",
    "min": "minutes",
    "minute": "minutes",
    "hour": "hours",
    "day": "days",
    "week": "weeks",
}
OFFSET_TERM = re.compile(r"([+-]?\d+)\s*(sec|second|min|minute|hour|day|week)s?\b", re.IGNORECASE)


def utc_now() -> str:
    return datetime.now(timezone.utc).strftime(STORAGE_FORMAT)


def to_storage(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(STORAGE_FORMAT)


def parse_storage(value) -> datetime:
    """Parse a stored timestamp as naive UTC. Raises ValueError when unparseable."""
    parsed = datetime.fromisoformat(str(value).strip())
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_offset(expression: str) -> timedelta:
    """Parse a relative expression like ``-5 hours`` or ``+3 hours 30 minutes``."""
    delta = timedelta()
    for amount, unit in OFFSET_TERM.findall(expression):
        delta += timedelta(**{_UNITS[unit.lower()]: int(amount)})
    return delta
