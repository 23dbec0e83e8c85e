# app/core/validators.py
"""
Field sanitizers shared by the services.

Every function takes a raw value and returns either the normalized value or
None when the value is unusable. None of them raise: deciding what a missing
or invalid field means is up to the caller, and so are cross-field checks
such as end-after-start.
"""
import re
from datetime import date, datetime, timezone
from typing import Any, Iterable, List, Optional

from bson import ObjectId

ROLES = ("student", "teacher", "admin")
ROLE_ALIASES = {"college_admin": "admin"}

DAYS_OF_WEEK = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]{3,30}$")
_TIME_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")
_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")


def bounded_string(value: Any, max_length: int = 1000, required: bool = True) -> Optional[str]:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()[:max_length]
    if required and not cleaned:
        return None
    return cleaned


def identifier(value: Any) -> Optional[str]:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, str) and ObjectId.is_valid(value.strip()):
        return value.strip().lower()
    return None


def parse_date(value: Any) -> Optional[datetime]:
    """Parse an ISO date or datetime into an aware UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def role(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    normalized = ROLE_ALIASES.get(value.strip().lower(), value.strip().lower())
    return normalized if normalized in ROLES else None


def day_of_week(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    normalized = value.strip().capitalize()
    return normalized if normalized in DAYS_OF_WEEK else None


def time_of_day(value: Any) -> Optional[str]:
    """Validate "H:MM"/"HH:MM" and return it zero-padded."""
    if not isinstance(value, str):
        return None
    match = _TIME_RE.match(value.strip())
    if not match:
        return None
    return f"{int(match.group(1)):02d}:{match.group(2)}"


def time_to_minutes(value: Any) -> Optional[int]:
    normalized = time_of_day(value)
    if normalized is None:
        return None
    hours, minutes = normalized.split(":")
    return int(hours) * 60 + int(minutes)


def hex_color(value: Any) -> Optional[str]:
    if isinstance(value, str) and _HEX_COLOR_RE.match(value.strip()):
        return value.strip()
    return None


def bounded_int(value: Any, lo: int, hi: int) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    elif isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return None
    if not isinstance(value, int):
        return None
    return value if lo <= value <= hi else None


def email(value: Any) -> Optional[str]:
    cleaned = bounded_string(value, 255)
    if cleaned is None or not _EMAIL_RE.match(cleaned):
        return None
    return cleaned.lower()


def username(value: Any) -> Optional[str]:
    cleaned = bounded_string(value, 30)
    if cleaned is None or not _USERNAME_RE.match(cleaned):
        return None
    return cleaned


def password(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not 6 <= len(value) <= 128:
        return None
    return value


def enum_value(value: Any, allowed: Iterable[str]) -> Optional[str]:
    if not isinstance(value, str):
        return None
    normalized = value.strip().lower()
    return normalized if normalized in allowed else None


def tags(value: Any, max_tags: int = 20) -> List[str]:
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        return []
    out = []
    for item in items:
        cleaned = bounded_string(item, 50)
        if cleaned and cleaned not in out:
            out.append(cleaned)
    return out[:max_tags]
