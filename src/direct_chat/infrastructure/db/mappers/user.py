from __future__ import annotations

from direct_chat.domain.entities.user import User
from direct_chat.infrastructure.db.models.user import UserModel


def model_to_entity(model: UserModel) -> User:
    return User(
        id=model.id,
        email=model.email,
        full_name=model.full_name,
        password_hash=model.password_hash,
        profile_pic=model.profile_pic,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_model(entity: User) -> UserModel:
    return UserModel(
        id=entity.id,
        email=entity.email,
        full_name=entity.full_name,
        password_hash=entity.password_hash,
        profile_pic=entity.profile_pic,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )
