"""Domain helpers for the user record (shape, validation, serialization)."""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s.]+")
EMAIL_MAX_LENGTH = 254
USER_FIELDS = ("id", "name", "email", "created_at", "updated_at")
RFC3339_PATTERN = re.compile(r"(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(\.\d+)?([Zz]|[+-]\d{2}:\d{2})")


def format_timestamp(value: datetime) -> str:
    """RFC3339 string for the snapshot file / API responses."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC3339 timestamp (offset required, any fraction length)."""
    if not isinstance(value, str):
        raise ValueError(f"invalid timestamp: {value!r}")
    match = RFC3339_PATTERN.fullmatch(value)
    if not match:
        raise ValueError(f"invalid RFC3339 timestamp: {value!r}")
    date_part, time_part, fraction, offset = match.groups()
    # fromisoformat so aceita "Z" e fracoes != 3/6 digitos a partir do 3.11
    if offset in ("Z", "z"):
        offset = "+00:00"
    fraction = "." + fraction[1:7].ljust(6, "0") if fraction else ""
    return datetime.fromisoformat(f"{date_part}T{time_part}{fraction}{offset}")


def is_valid_email(value: str | None) -> bool:
    """Return True when value looks like local@domain.tld."""
    if not value or len(value) > EMAIL_MAX_LENGTH:
        return False
    return bool(EMAIL_PATTERN.fullmatch(value))


def normalize_name(value: str | None) -> str:
    return (value or "").strip()


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "User":
        """Build a User from its JSON form; raises ValueError on bad input."""
        if not isinstance(data, Mapping):
            raise ValueError(f"user entry must be an object, got {type(data).__name__}")
        missing = [field for field in USER_FIELDS if field not in data]
        if missing:
            raise ValueError(f"user entry missing fields: {', '.join(missing)}")
        for field in ("id", "name", "email"):
            if not isinstance(data[field], str):
                raise ValueError(f"user field {field!r} must be a string")
        return cls(
            id=data["id"],
            name=data["name"],
            email=data["email"],
            created_at=parse_timestamp(data["created_at"]),
            updated_at=parse_timestamp(data["updated_at"]),
        )
