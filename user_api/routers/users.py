from __future__ import annotations

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, field_validator

from user_api.domain.users import is_valid_email, normalize_name
from user_api.repositories.json_storage import (
    AlreadyExistsError,
    NotFoundError,
    PersistenceError,
)
from user_api.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


class UserPayload(BaseModel):
    name: str
    email: str

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        name = normalize_name(value)
        if not name:
            raise ValueError("name is required")
        return name

    @field_validator("email")
    @classmethod
    def _email_shape(cls, value: str) -> str:
        # sem normalizacao: espacos em volta invalidam o endereco
        if not is_valid_email(value):
            raise ValueError("email must be a valid e-mail address")
        return value


class UserCreate(UserPayload):
    pass


class UserUpdate(UserPayload):
    pass


def _get_user_service(request: Request) -> UserService:
    svc = getattr(getattr(request.app, "state", None), "user_service", None)
    if not svc:
        raise RuntimeError("UserService nao configurado")
    return svc


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


_NOT_FOUND = "User not found"


@router.get("")
def list_users(request: Request):
    svc = _get_user_service(request)
    try:
        users = svc.list_users()
    except PersistenceError:
        return _error("Failed to fetch users", 500)
    return [user.to_dict() for user in users]


@router.get("/{user_id}")
def get_user(user_id: str, request: Request):
    svc = _get_user_service(request)
    try:
        user = svc.get_user(user_id)
    except NotFoundError:
        return _error(_NOT_FOUND, 404)
    except PersistenceError:
        return _error("Failed to fetch user", 500)
    return user.to_dict()


@router.post("", status_code=201)
def create_user(payload: UserCreate, request: Request):
    svc = _get_user_service(request)
    try:
        user = svc.create_user(payload.name, payload.email)
    except AlreadyExistsError:
        return _error("User with this email already exists", 409)
    except PersistenceError:
        return _error("Failed to create user", 500)
    return user.to_dict()


@router.put("/{user_id}")
def update_user(user_id: str, payload: UserUpdate, request: Request):
    svc = _get_user_service(request)
    try:
        user = svc.update_user(user_id, payload.name, payload.email)
    except NotFoundError:
        return _error(_NOT_FOUND, 404)
    except AlreadyExistsError:
        return _error("Email already in use by another user", 409)
    except PersistenceError:
        return _error("Failed to update user", 500)
    return user.to_dict()


@router.delete("/{user_id}", status_code=204)
def delete_user(user_id: str, request: Request):
    svc = _get_user_service(request)
    try:
        svc.delete_user(user_id)
    except NotFoundError:
        return _error(_NOT_FOUND, 404)
    except PersistenceError:
        return _error("Failed to delete user", 500)
    return Response(status_code=204)
