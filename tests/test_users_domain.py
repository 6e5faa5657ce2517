from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Garante que o pacote user_api seja importável durante os testes locais
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from user_api.domain.users import (  # noqa: E402
    User,
    format_timestamp,
    is_valid_email,
    normalize_name,
    parse_timestamp,
)


@pytest.mark.parametrize("value", ["a@x.com", "first.last+tag@sub.example.org", "u@d.io"])
def test_valid_emails(value):
    assert is_valid_email(value)


@pytest.mark.parametrize("value", ["", None, "plain", "a@b", "a @x.com", "a@@x.com", "@x.com", "a@x.", "a" * 250 + "@x.com"])
def test_invalid_emails(value):
    assert not is_valid_email(value)


def test_normalize_name_strips_whitespace():
    assert normalize_name("  Alice  ") == "Alice"
    assert normalize_name(None) == ""


def test_parse_timestamp_accepts_zulu_and_offsets():
    utc = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert parse_timestamp("2024-01-02T03:04:05Z") == utc
    assert parse_timestamp("2024-01-02t03:04:05z") == utc
    assert parse_timestamp("2024-01-02T00:04:05-03:00") == utc
    assert parse_timestamp("2024-01-02T03:04:05.123456789Z") == utc.replace(microsecond=123456)
    assert parse_timestamp("2024-01-02T03:04:05.5+00:00") == utc.replace(microsecond=500000)


@pytest.mark.parametrize(
    "value",
    [
        "not a date",
        1700000000,
        "2024-01-02",
        "2024-01-02 03:04:05Z",
        "2024-01-02T03:04:05",
        " 2024-01-02T03:04:05Z",
        "2024-01-02T03:04Z",
        "2024-13-02T03:04:05Z",
    ],
)
def test_parse_timestamp_rejects_non_rfc3339(value):
    with pytest.raises(ValueError):
        parse_timestamp(value)


def test_format_timestamp_keeps_offset_and_treats_naive_as_utc():
    offset = timezone(timedelta(hours=-3))
    assert format_timestamp(datetime(2024, 1, 2, 3, 4, 5, tzinfo=offset)) == "2024-01-02T03:04:05-03:00"
    assert format_timestamp(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05+00:00"


def test_user_dict_round_trip():
    now = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
    user = User(id="u1", name="Alice", email="a@x.com", created_at=now, updated_at=now)
    data = user.to_dict()
    assert data == {
        "id": "u1",
        "name": "Alice",
        "email": "a@x.com",
        "created_at": "2024-01-02T03:04:05.678000+00:00",
        "updated_at": "2024-01-02T03:04:05.678000+00:00",
    }
    assert User.from_dict(data) == user


def test_from_dict_reports_missing_fields():
    with pytest.raises(ValueError, match="email"):
        User.from_dict({"id": "u1", "name": "A", "created_at": "2024-01-01T00:00:00Z", "updated_at": "2024-01-01T00:00:00Z"})


def test_from_dict_rejects_non_string_fields():
    with pytest.raises(ValueError):
        User.from_dict({"id": 1, "name": "A", "email": "a@x.com", "created_at": "2024-01-01T00:00:00Z", "updated_at": "2024-01-01T00:00:00Z"})
    with pytest.raises(ValueError):
        User.from_dict(["not", "a", "dict"])
