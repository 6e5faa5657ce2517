"""User operation counters, recorded on an OpenTelemetry meter and mirrored for /metrics."""
from __future__ import annotations

import threading
from typing import Dict, Optional

from opentelemetry import metrics
from opentelemetry.metrics import Meter

METER_NAME = "user-api"


class UserMetrics:
    def __init__(self, meter: Optional[Meter] = None) -> None:
        meter = meter or metrics.get_meter(METER_NAME)
        self._users_counter = meter.create_up_down_counter(
            "user_api_users_total",
            unit="{users}",
            description="Current number of users in the system",
        )
        self._created_counter = meter.create_counter(
            "user_api_users_created_total",
            unit="{users}",
            description="Total number of users created",
        )
        self._deleted_counter = meter.create_counter(
            "user_api_users_deleted_total",
            unit="{users}",
            description="Total number of users deleted",
        )
        self._operations_counter = meter.create_counter(
            "user_api_operations_total",
            unit="{operations}",
            description="Total number of user operations",
        )
        self._lock = threading.Lock()
        self._users_total = 0
        self._created = 0
        self._deleted = 0
        self._operations: Dict[str, int] = {}

    def set_users_total(self, value: int) -> None:
        with self._lock:
            delta = value - self._users_total
            self._users_total = value
        if delta:
            self._users_counter.add(delta)

    def record_operation(self, operation: str) -> None:
        with self._lock:
            self._operations[operation] = self._operations.get(operation, 0) + 1
        self._operations_counter.add(1, {"operation": operation})

    def user_created(self) -> None:
        with self._lock:
            self._created += 1
            self._users_total += 1
        self._created_counter.add(1)
        self._users_counter.add(1)

    def user_deleted(self) -> None:
        with self._lock:
            self._deleted += 1
            self._users_total -= 1
        self._deleted_counter.add(1)
        self._users_counter.add(-1)

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "users_total": self._users_total,
                "users_created_total": self._created,
                "users_deleted_total": self._deleted,
                "operations_total": dict(self._operations),
            }
