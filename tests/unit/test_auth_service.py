from __future__ import annotations

import uuid

import pytest

from direct_chat.application.dto.principal import Principal
from direct_chat.application.dto.user import SignupDTO
from direct_chat.application.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from direct_chat.services import auth_service, user_service
from tests.conftest import FakeUoW


@pytest.mark.asyncio
async def test_signup_hashes_password_and_normalizes_email(hasher):
    uow = FakeUoW()

    user = await auth_service.signup(
        SignupDTO(full_name=" Dana ", email=" Dana@Example.COM ", password="secret1"),
        hasher,
        uow,
    )

    assert user.email == "dana@example.com"
    assert user.full_name == "Dana"
    assert user.password_hash != "secret1"
    assert hasher.verify("secret1", user.password_hash)
    assert uow._committed is True


@pytest.mark.asyncio
async def test_signup_short_password(hasher):
    with pytest.raises(ValidationError):
        await auth_service.signup(
            SignupDTO(full_name="Dana", email="dana@example.com", password="12345"),
            hasher,
            FakeUoW(),
        )


@pytest.mark.asyncio
async def test_signup_duplicate_email(hasher):
    uow = FakeUoW()
    dto = SignupDTO(full_name="Dana", email="dana@example.com", password="secret1")
    await auth_service.signup(dto, hasher, uow)

    with pytest.raises(ConflictError):
        await auth_service.signup(dto, hasher, uow)


@pytest.mark.asyncio
async def test_login(hasher):
    uow = FakeUoW()
    created = await auth_service.signup(
        SignupDTO(full_name="Dana", email="dana@example.com", password="secret1"), hasher, uow,
    )

    user = await auth_service.login("DANA@example.com", "secret1", hasher, uow)

    assert user.id == created.id


@pytest.mark.asyncio
@pytest.mark.parametrize("email,password", [
    ("dana@example.com", "wrong-password"),
    ("nobody@example.com", "secret1"),
])
async def test_login_invalid_credentials(hasher, email, password):
    uow = FakeUoW()
    await auth_service.signup(
        SignupDTO(full_name="Dana", email="dana@example.com", password="secret1"), hasher, uow,
    )

    with pytest.raises(UnauthorizedError):
        await auth_service.login(email, password, hasher, uow)


@pytest.mark.asyncio
async def test_update_profile(alice_principal, uow):
    user = await auth_service.update_profile(alice_principal, "https://cdn/alice.png", uow)

    assert user.profile_pic == "https://cdn/alice.png"
    assert uow._committed is True


@pytest.mark.asyncio
async def test_update_profile_requires_value(alice_principal, uow):
    with pytest.raises(ValidationError):
        await auth_service.update_profile(alice_principal, "  ", uow)


@pytest.mark.asyncio
async def test_current_user_missing():
    with pytest.raises(NotFoundError):
        await auth_service.get_current_user(Principal(user_id=uuid.uuid4()), FakeUoW())


@pytest.mark.asyncio
async def test_sidebar_excludes_caller(alice_principal, bob, uow):
    users = await user_service.list_sidebar_users(alice_principal, uow)

    assert [u.id for u in users] == [bob.id]
