"""
Wire shapes shared by the write path: ISO dates, `Date` and `Pointer`
objects, and fields that never leave the server.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

USER_CLASS = "_User"
SESSION_CLASS = "_Session"
INSTALLATION_CLASS = "_Installation"
ROLE_CLASS = "_Role"
PRODUCT_CLASS = "_Product"

SYSTEM_CLASSES = (USER_CLASS, INSTALLATION_CLASS, ROLE_CLASS, SESSION_CLASS, PRODUCT_CLASS)

# stored on user rows but never returned to clients
INTERNAL_USER_FIELDS = ("password", "_hashed_password", "_email_verify_token")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Millisecond-precision UTC timestamp ending in `Z`."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_iso(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def encode_date(value: datetime) -> Dict[str, str]:
    return {"__type": "Date", "iso": to_iso(value)}


def decode_date(value: Any) -> Optional[datetime]:
    if isinstance(value, dict) and value.get("__type") == "Date":
        return parse_iso(value["iso"])
    if isinstance(value, str):
        return parse_iso(value)
    if isinstance(value, datetime):
        return value
    return None


def one_year_from(value: datetime) -> datetime:
    try:
        return value.replace(year=value.year + 1)
    except ValueError:
        # Feb 29th
        return value.replace(year=value.year + 1, day=28)


def pointer(class_name: str, object_id: str) -> Dict[str, str]:
    return {"__type": "Pointer", "className": class_name, "objectId": object_id}


def user_pointer(object_id: str) -> Dict[str, str]:
    return pointer(USER_CLASS, object_id)


def strip_internal_fields(obj: Dict[str, Any]) -> Dict[str, Any]:
    for key in INTERNAL_USER_FIELDS:
        obj.pop(key, None)
    return obj
