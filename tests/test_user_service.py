from __future__ import annotations

import logging
import sys
from datetime import datetime, timedelta, timezone
from itertools import count
from pathlib import Path

import pytest

# Garante que o pacote user_api seja importável durante os testes locais
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from user_api.core.metrics import UserMetrics  # noqa: E402
from user_api.repositories import json_storage  # noqa: E402
from user_api.repositories.json_storage import (  # noqa: E402
    AlreadyExistsError,
    JSONUserStore,
    NotFoundError,
    PersistenceError,
)
from user_api.services.user_service import UserService  # noqa: E402

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self) -> None:
        self.now = T0

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(minutes=1)
        return current


@pytest.fixture()
def svc(tmp_path):
    ids = count(1)
    store = JSONUserStore(tmp_path / "users.json")
    return UserService(store, UserMetrics(), clock=FakeClock(), id_factory=lambda: f"id-{next(ids)}")


def test_create_generates_id_and_equal_timestamps(svc):
    user = svc.create_user("Alice", "a@x.com")
    assert user.id == "id-1"
    assert user.created_at == user.updated_at == T0
    assert svc.get_user("id-1") == user


def test_default_ids_are_uuid4(tmp_path):
    svc = UserService(JSONUserStore(tmp_path / "users.json"))
    first = svc.create_user("Alice", "a@x.com")
    second = svc.create_user("Bob", "b@x.com")
    assert first.id != second.id
    assert len(first.id) == 36
    assert first.created_at.tzinfo is not None


def test_update_keeps_created_at_and_refreshes_updated_at(svc):
    created = svc.create_user("Alice", "a@x.com")
    updated = svc.update_user(created.id, "Alicia", "alicia@x.com")
    assert updated.created_at == created.created_at
    assert updated.updated_at > created.updated_at
    again = svc.update_user(created.id, "Alicia", "alicia@x.com")
    assert again.created_at == created.created_at
    assert svc.get_user(created.id) == again


def test_update_unknown_user_raises_not_found(svc):
    with pytest.raises(NotFoundError):
        svc.update_user("ghost", "X", "x@x.com")


def test_conflicts_propagate(svc):
    svc.create_user("Alice", "a@x.com")
    bob = svc.create_user("Bob", "b@x.com")
    with pytest.raises(AlreadyExistsError):
        svc.create_user("Other", "a@x.com")
    with pytest.raises(AlreadyExistsError):
        svc.update_user(bob.id, "Bob", "a@x.com")


def test_metrics_follow_successful_operations(svc):
    alice = svc.create_user("Alice", "a@x.com")
    svc.create_user("Bob", "b@x.com")
    with pytest.raises(AlreadyExistsError):
        svc.create_user("Dup", "b@x.com")
    svc.list_users()
    svc.get_user(alice.id)
    svc.update_user(alice.id, "Alicia", "a@x.com")
    svc.delete_user(alice.id)
    with pytest.raises(NotFoundError):
        svc.delete_user(alice.id)

    snap = svc.metrics.snapshot()
    assert snap["users_total"] == 1
    assert snap["users_created_total"] == 2
    assert snap["users_deleted_total"] == 1
    assert snap["operations_total"] == {
        "create": 3,
        "get_all": 1,
        "get_by_id": 1,
        "update": 1,
        "delete": 2,
    }


def test_users_total_starts_from_existing_snapshot(tmp_path):
    path = tmp_path / "users.json"
    seed = UserService(JSONUserStore(path))
    seed.create_user("Alice", "a@x.com")
    seed.create_user("Bob", "b@x.com")

    fresh = UserService(JSONUserStore(path), UserMetrics())
    assert fresh.metrics.snapshot()["users_total"] == 2


def test_persistence_failure_is_logged_and_reraised(svc, monkeypatch, caplog):
    def boom(*_a, **_kw):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(json_storage.os, "replace", boom)
    with caplog.at_level(logging.ERROR, logger="user_api.services.user_service"):
        with pytest.raises(PersistenceError):
            svc.create_user("Alice", "a@x.com")
    assert "Failed to create user" in caplog.text
    assert svc.list_users() == []
    assert svc.metrics.snapshot()["users_created_total"] == 0


def test_not_found_logged_as_warning(svc, caplog):
    with caplog.at_level(logging.WARNING, logger="user_api.services.user_service"):
        with pytest.raises(NotFoundError):
            svc.get_user("ghost")
    assert any(r.levelno == logging.WARNING and "ghost" in r.getMessage() for r in caplog.records)
