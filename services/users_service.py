"""Service layer for user registration."""

import logging
from collections.abc import Mapping
from typing import Any

from fastapi import status
from starlette.concurrency import run_in_threadpool

from auth.passwords import PasswordHasher
from models.user import (
    PASSWORD_MAX_BYTES,
    PASSWORD_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
    USERNAME_MIN_LENGTH,
    User,
    UserCreate,
)
from repos.users_repo import DuplicateUsernameError, UsersRepository

logger = logging.getLogger(__name__)

# Wire names, in the order they are checked
REQUIRED_FIELDS = ("username", "password")
STRING_FIELDS = ("username", "password", "fullName")
TRIMMED_FIELDS = ("username", "password")

USERNAME_TAKEN_MESSAGE = "The username already exists"
INVALID_BODY_MESSAGE = "Request body must be a JSON object"


class UserRegistrationError(Exception):
    """Expected registration failure, reported to the client as {"message": ...}."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(UserRegistrationError):
    """Request body is malformed."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class ConflictError(UserRegistrationError):
    """Username is already registered."""

    status_code = status.HTTP_400_BAD_REQUEST


def validate_user_payload(data: Mapping[str, Any]) -> UserCreate:
    """
    Validate a raw registration body and normalize it.

    Checks run in a fixed order and the first failure wins: presence,
    type, surrounding whitespace, then lengths.

    Args:
        data: Decoded JSON object from the request

    Returns:
        UserCreate with full_name stripped (empty string when absent)

    Raises:
        ValidationError: With a client-facing message
    """
    for field in REQUIRED_FIELDS:
        if field not in data:
            raise ValidationError(f"Missing '{field}' in request body")

    for field in STRING_FIELDS:
        if field in data and not isinstance(data[field], str):
            raise ValidationError("Field is not a string")

    for field in TRIMMED_FIELDS:
        if data[field].strip() != data[field]:
            raise ValidationError("Cannot start or end with whitespace")

    username = data["username"]
    password = data["password"]

    if len(username.strip()) < USERNAME_MIN_LENGTH:
        raise ValidationError(f"Must be at least {USERNAME_MIN_LENGTH} characters long")

    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Must be at least {PASSWORD_MIN_LENGTH} characters long")
    if len(password) > PASSWORD_MAX_LENGTH:
        raise ValidationError(f"Must be at most {PASSWORD_MAX_LENGTH} characters long")
    # bcrypt refuses input over 72 bytes; multi-byte passwords can hit that first
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValidationError(f"Must be at most {PASSWORD_MAX_BYTES} bytes long when UTF-8 encoded")

    return UserCreate(
        username=username,
        password=password,
        full_name=data.get("fullName", "").strip(),
    )


async def register_user(
    repo: UsersRepository,
    *,
    payload: Mapping[str, Any],
    hasher: PasswordHasher,
) -> User:
    """
    Create a new user account.

    Args:
        repo: Users repository providing insert_unique
        payload: Raw request body
        hasher: Password hasher used to derive the stored credential

    Returns:
        Created user

    Raises:
        ValidationError: If the body fails validation
        ConflictError: If the username is already registered
    """
    user_data = validate_user_payload(payload)

    # bcrypt is slow on purpose; keep it off the event loop
    password_hash = await run_in_threadpool(hasher.hash, user_data.password)

    user = User(
        username=user_data.username,
        full_name=user_data.full_name,
        password_hash=password_hash,
    )

    try:
        user = await repo.insert_unique(user)
    except DuplicateUsernameError:
        logger.info("Registration rejected: username already exists")
        raise ConflictError(USERNAME_TAKEN_MESSAGE)

    logger.info("Registered user %s", user.id)
    return user
