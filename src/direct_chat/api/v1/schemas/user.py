from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class SignupRequest(BaseModel):
    full_name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1, max_length=72)


class LoginRequest(BaseModel):
    email: str
    password: str


class UpdateProfileRequest(BaseModel):
    profile_pic: str = Field(max_length=2048)


class UserResponse(BaseModel):
    id: UUID
    email: str
    full_name: str
    profile_pic: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
