from __future__ import annotations

from fastapi import APIRouter, Response, status

from direct_chat.api.cookies import clear_auth_cookie, set_auth_cookie
from direct_chat.api.deps import CurrentPrincipal, HasherDep, TokenServiceDep, UoWDep
from direct_chat.api.v1.schemas.user import (
    LoginRequest,
    SignupRequest,
    UpdateProfileRequest,
    UserResponse,
)
from direct_chat.application.dto.user import SignupDTO
from direct_chat.services import auth_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    body: SignupRequest,
    response: Response,
    uow: UoWDep,
    hasher: HasherDep,
    tokens: TokenServiceDep,
) -> UserResponse:
    user = await auth_service.signup(
        SignupDTO(full_name=body.full_name, email=body.email, password=body.password),
        hasher,
        uow,
    )
    set_auth_cookie(response, tokens.issue(user.id))
    return UserResponse.model_validate(user, from_attributes=True)


@router.post("/login", response_model=UserResponse)
async def login(
    body: LoginRequest,
    response: Response,
    uow: UoWDep,
    hasher: HasherDep,
    tokens: TokenServiceDep,
) -> UserResponse:
    user = await auth_service.login(body.email, body.password, hasher, uow)
    set_auth_cookie(response, tokens.issue(user.id))
    return UserResponse.model_validate(user, from_attributes=True)


@router.post("/logout")
async def logout(response: Response) -> dict[str, str]:
    clear_auth_cookie(response)
    return {"message": "Logged out successfully"}


@router.get("/check", response_model=UserResponse)
async def check(principal: CurrentPrincipal, uow: UoWDep) -> UserResponse:
    user = await auth_service.get_current_user(principal, uow)
    return UserResponse.model_validate(user, from_attributes=True)


@router.put("/update-profile", response_model=UserResponse)
async def update_profile(
    body: UpdateProfileRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> UserResponse:
    user = await auth_service.update_profile(principal, body.profile_pic, uow)
    return UserResponse.model_validate(user, from_attributes=True)
