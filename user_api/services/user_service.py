"""
User CRUD use cases.

Generates ids and timestamps, carries created_at forward on updates and
records logs, spans and metrics around the store calls. Store errors are
re-raised unchanged so routers can map them to HTTP responses.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode, Tracer

from user_api.core.metrics import UserMetrics
from user_api.domain.users import User
from user_api.repositories.json_storage import (
    AlreadyExistsError,
    JSONUserStore,
    NotFoundError,
    PersistenceError,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _record_error(span: Span, exc: Exception) -> None:
    span.record_exception(exc)
    span.set_status(Status(StatusCode.ERROR, str(exc)))


class UserService:
    """Orchestrates the JSON store for the /users endpoints."""

    def __init__(
        self,
        store: JSONUserStore,
        metrics: Optional[UserMetrics] = None,
        *,
        tracer: Optional[Tracer] = None,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self.store = store
        self.metrics = metrics or UserMetrics()
        self._tracer = tracer or trace.get_tracer(__name__)
        self._clock = clock
        self._id_factory = id_factory
        self.metrics.set_users_total(len(store.list()))

    def _span(self, name: str):
        # NotFound/AlreadyExists sao erros do cliente: so falhas de disco marcam o span
        return self._tracer.start_as_current_span(name, record_exception=False, set_status_on_exception=False)

    def list_users(self) -> List[User]:
        with self._span("users.list") as span:
            logger.info("Fetching all users")
            self.metrics.record_operation("get_all")
            try:
                users = self.store.list()
            except PersistenceError as exc:
                _record_error(span, exc)
                logger.exception("Failed to fetch users")
                raise
            span.set_attribute("user_count", len(users))
            logger.info("Successfully fetched users count=%d", len(users))
            return users

    def get_user(self, user_id: str) -> User:
        with self._span("users.get") as span:
            span.set_attribute("user.id", user_id)
            logger.info("Fetching user by ID user_id=%s", user_id)
            self.metrics.record_operation("get_by_id")
            try:
                user = self.store.get(user_id)
            except NotFoundError:
                logger.warning("User not found user_id=%s", user_id)
                raise
            logger.info("Successfully fetched user user_id=%s", user_id)
            return user

    def create_user(self, name: str, email: str) -> User:
        with self._span("users.create") as span:
            self.metrics.record_operation("create")
            logger.info("Creating new user name=%s email=%s", name, email)
            now = self._clock()
            user = User(id=self._id_factory(), name=name, email=email, created_at=now, updated_at=now)
            span.set_attribute("user.id", user.id)
            span.set_attribute("user.email", email)
            try:
                self.store.create(user)
            except AlreadyExistsError:
                logger.warning("User with email already exists email=%s", email)
                raise
            except PersistenceError as exc:
                _record_error(span, exc)
                logger.exception("Failed to create user")
                raise
            self.metrics.user_created()
            logger.info("Successfully created user user_id=%s", user.id)
            return user

    def update_user(self, user_id: str, name: str, email: str) -> User:
        with self._span("users.update") as span:
            span.set_attribute("user.id", user_id)
            span.set_attribute("user.email", email)
            self.metrics.record_operation("update")
            logger.info("Updating user user_id=%s name=%s email=%s", user_id, name, email)
            try:
                existing = self.store.get(user_id)
                # created_at vem do registro atual; o store nao recalcula
                user = User(
                    id=user_id,
                    name=name,
                    email=email,
                    created_at=existing.created_at,
                    updated_at=self._clock(),
                )
                self.store.update(user)
            except NotFoundError:
                logger.warning("User not found user_id=%s", user_id)
                raise
            except AlreadyExistsError:
                logger.warning("Email already in use email=%s", email)
                raise
            except PersistenceError as exc:
                _record_error(span, exc)
                logger.exception("Failed to update user user_id=%s", user_id)
                raise
            logger.info("Successfully updated user user_id=%s", user_id)
            return user

    def delete_user(self, user_id: str) -> None:
        with self._span("users.delete") as span:
            span.set_attribute("user.id", user_id)
            logger.info("Deleting user user_id=%s", user_id)
            self.metrics.record_operation("delete")
            try:
                self.store.delete(user_id)
            except NotFoundError:
                logger.warning("User not found user_id=%s", user_id)
                raise
            except PersistenceError as exc:
                _record_error(span, exc)
                logger.exception("Failed to delete user user_id=%s", user_id)
                raise
            self.metrics.user_deleted()
            logger.info("Successfully deleted user user_id=%s", user_id)
