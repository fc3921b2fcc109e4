"""Seed development data: two users who already exchanged a few messages.

Both accounts use the password ``password123``.
"""
from __future__ import annotations

import asyncio
import logging
import uuid

from direct_chat.application.dto.message import SendMessageDTO
from direct_chat.application.dto.principal import Principal
from direct_chat.application.dto.user import SignupDTO
from direct_chat.infrastructure.auth.passwords import BcryptHasher
from direct_chat.infrastructure.db.session import create_schema, dispose_engine
from direct_chat.infrastructure.db.uow import SqlAlchemyUoW
from direct_chat.logging_config import configure_logging
from direct_chat.services import auth_service, message_service

logger = logging.getLogger(__name__)

PASSWORD = "password123"


async def seed() -> None:
    await create_schema()
    hasher = BcryptHasher()

    async with SqlAlchemyUoW() as uow:
        alice = await auth_service.signup(
            SignupDTO(full_name="Alice Example", email="alice@example.com", password=PASSWORD),
            hasher,
            uow,
        )
        bob = await auth_service.signup(
            SignupDTO(full_name="Bob Example", email="bob@example.com", password=PASSWORD),
            hasher,
            uow,
        )

        conversation = [
            (alice, bob, "Hey Bob, got a minute?"),
            (bob, alice, "Sure, what's up?"),
            (alice, bob, "Lunch tomorrow?"),
            (bob, alice, "Sounds good 👍"),
        ]
        for sender, receiver, text in conversation:
            await message_service.send_message(
                Principal(user_id=sender.id),
                SendMessageDTO(receiver_id=receiver.id, text=text, client_msg_id=uuid.uuid4()),
                uow,
            )

        logger.info(
            "Seeded users %s and %s with %d messages", alice.email, bob.email, len(conversation),
        )


async def _main() -> None:
    try:
        await seed()
    finally:
        await dispose_engine()


def main() -> None:
    configure_logging()
    asyncio.run(_main())


if __name__ == "__main__":
    main()
