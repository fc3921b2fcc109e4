from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from direct_chat.application.dto.principal import Principal
from direct_chat.application.dto.user import SignupDTO
from direct_chat.application.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from direct_chat.application.ports.auth import PasswordHasher
from direct_chat.application.uow import UnitOfWork
from direct_chat.domain.entities.user import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def _normalize_email(email: str) -> str:
    return email.strip().lower()


async def signup(data: SignupDTO, hasher: PasswordHasher, uow: UnitOfWork) -> User:
    full_name = data.full_name.strip()
    email = _normalize_email(data.email)
    if not full_name or not email or not data.password:
        raise ValidationError("All fields are required")
    if len(data.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(data.password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

    if await uow.users.get_by_email(email) is not None:
        raise ConflictError("Email already exists")

    now = datetime.now(timezone.utc)
    user = await uow.users_w.create(
        User(
            id=uuid.uuid4(),
            email=email,
            full_name=full_name,
            password_hash=hasher.hash(data.password),
            profile_pic=None,
            created_at=now,
            updated_at=now,
        )
    )
    await uow.commit()
    logger.info("User %s signed up", user.id)
    return user


async def login(email: str, password: str, hasher: PasswordHasher, uow: UnitOfWork) -> User:
    user = await uow.users.get_by_email(_normalize_email(email))
    # Same error for unknown email and bad password.
    if user is None or not hasher.verify(password, user.password_hash):
        raise UnauthorizedError("Invalid credentials")
    return user


async def get_current_user(principal: Principal, uow: UnitOfWork) -> User:
    user = await uow.users.get_by_id(principal.user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def update_profile(principal: Principal, profile_pic: str, uow: UnitOfWork) -> User:
    profile_pic = profile_pic.strip()
    if not profile_pic:
        raise ValidationError("Profile pic is required")

    user = await uow.users_w.set_profile_pic(principal.user_id, profile_pic)
    if user is None:
        raise NotFoundError("User not found")
    await uow.commit()
    return user
