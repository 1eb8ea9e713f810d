"""User endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends, status

from api.deps import get_password_hasher, get_users_repository
from auth.passwords import PasswordHasher
from models.user import UserResponse
from repos.users_repo import UsersRepository
from services.users_service import INVALID_BODY_MESSAGE, ValidationError, register_user

router = APIRouter()


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: Any = Body(None),
    repo: UsersRepository = Depends(get_users_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    """
    Register a new user.

    Public endpoint. The body is validated field by field so the first
    problem found is the one reported.

    Args:
        payload: Decoded JSON body {username, password, fullName?}. None for
            an empty or null body and raw bytes for a non-JSON content type;
            both are read as an empty object
        repo: Users repository
        hasher: Password hasher

    Returns:
        UserResponse: {id, username, fullName}

    Raises:
        ValidationError: 422 if the body is malformed
        ConflictError: 400 if the username already exists
    """
    if payload is None or isinstance(payload, bytes):
        payload = {}
    elif not isinstance(payload, dict):
        raise ValidationError(INVALID_BODY_MESSAGE)

    user = await register_user(repo, payload=payload, hasher=hasher)
    return UserResponse.model_validate(user)
