"""
JSON file persistence for users.

The whole user set lives in memory (id -> User) and every mutation rewrites
the snapshot file before returning. Reads never touch the disk.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Callable, Dict, List

from user_api.core.locks import ReadWriteLock
from user_api.domain.users import User

DIR_MODE = 0o755
FILE_MODE = 0o644


class StoreError(Exception):
    """Base class for storage exceptions."""


class NotFoundError(StoreError):
    def __init__(self, user_id: str):
        super().__init__(f"user {user_id!r} not found")
        self.user_id = user_id


class AlreadyExistsError(StoreError):
    def __init__(self, email: str):
        super().__init__(f"user with email {email!r} already exists")
        self.email = email


class PersistenceError(StoreError):
    """Raised when the snapshot cannot be read, parsed or written."""


class JSONUserStore:
    """Concurrency-safe user store backed by a JSON snapshot file."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self._lock = ReadWriteLock()
        self._users: Dict[str, User] = {}
        try:
            self.path.parent.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(f"cannot create data directory {self.path.parent}: {exc}") from exc
        self._users = self._load()

    # -------------------------------------- disk --------------------------------------
    def _load(self) -> Dict[str, User]:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise PersistenceError(f"cannot read {self.path}: {exc}") from exc
        if not raw:
            return {}
        try:
            entries = json.loads(raw.decode("utf-8"))
            if not isinstance(entries, list):
                raise ValueError("snapshot must be a JSON array")
            users = [User.from_dict(entry) for entry in entries]
        except (ValueError, RecursionError) as exc:
            # JSONDecodeError e UnicodeDecodeError sao ValueError; aninhamento profundo estoura a pilha
            raise PersistenceError(f"malformed snapshot {self.path}: {exc}") from exc
        return {user.id: user for user in users}

    def _save(self) -> None:
        payload = json.dumps(
            [user.to_dict() for user in self._users.values()],
            ensure_ascii=False,
            indent=2,
        )
        tmp = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                delete=False,
                dir=str(self.path.parent),
                prefix=f".{self.path.name}.",
                encoding="utf-8",
            ) as fh:
                tmp = Path(fh.name)
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.chmod(tmp, FILE_MODE)
            os.replace(tmp, self.path)
            tmp = None
        except OSError as exc:
            raise PersistenceError(f"cannot write {self.path}: {exc}") from exc
        finally:
            if tmp is not None:
                tmp.unlink(missing_ok=True)

    def _commit(self, rollback: Callable[[], None]) -> None:
        """Persist the index; undo the in-memory change if the write fails."""
        try:
            self._save()
        except PersistenceError:
            rollback()
            raise

    # -------------------------------------- reads --------------------------------------
    def list(self) -> List[User]:
        with self._lock.read_locked():
            return list(self._users.values())

    def get(self, user_id: str) -> User:
        with self._lock.read_locked():
            user = self._users.get(user_id)
        if user is None:
            raise NotFoundError(user_id)
        return user

    # -------------------------------------- writes --------------------------------------
    def _email_taken(self, email: str, exclude_id: str | None = None) -> bool:
        for user_id, existing in self._users.items():
            if existing.email == email and user_id != exclude_id:
                return True
        return False

    def create(self, user: User) -> None:
        with self._lock.write_locked():
            if self._email_taken(user.email):
                raise AlreadyExistsError(user.email)
            previous = self._users.get(user.id)
            self._users[user.id] = user

            def rollback() -> None:
                if previous is None:
                    self._users.pop(user.id, None)
                else:
                    self._users[user.id] = previous

            self._commit(rollback)

    def update(self, user: User) -> None:
        with self._lock.write_locked():
            previous = self._users.get(user.id)
            if previous is None:
                raise NotFoundError(user.id)
            if self._email_taken(user.email, exclude_id=user.id):
                raise AlreadyExistsError(user.email)
            self._users[user.id] = user
            self._commit(lambda: self._users.__setitem__(user.id, previous))

    def delete(self, user_id: str) -> None:
        with self._lock.write_locked():
            previous = self._users.pop(user_id, None)
            if previous is None:
                raise NotFoundError(user_id)
            self._commit(lambda: self._users.__setitem__(user_id, previous))
