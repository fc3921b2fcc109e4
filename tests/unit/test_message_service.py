from __future__ import annotations

import uuid

import pytest

from direct_chat.application.dto.message import SendMessageDTO
from direct_chat.application.exceptions import ForbiddenError, NotFoundError, ValidationError
from direct_chat.domain.value_objects.enums import ChatEvent
from direct_chat.services import message_service
from tests.conftest import FakeUoW, make_message, make_user, minutes


@pytest.mark.asyncio
async def test_send_message_creates_message(alice_principal, bob, uow):
    msg, created = await message_service.send_message(
        alice_principal, SendMessageDTO(receiver_id=bob.id, text="  hello  "), uow,
    )

    assert created is True
    assert msg.text == "hello"
    assert msg.sender_id == alice_principal.user_id
    assert msg.receiver_id == bob.id
    assert msg.deleted is False
    assert uow._committed is True


@pytest.mark.asyncio
async def test_send_image_only_message(alice_principal, bob, uow):
    msg, _ = await message_service.send_message(
        alice_principal,
        SendMessageDTO(receiver_id=bob.id, text="   ", image="https://cdn.example.com/cat.png"),
        uow,
    )

    assert msg.text is None
    assert msg.image == "https://cdn.example.com/cat.png"


@pytest.mark.asyncio
async def test_send_message_idempotent(alice_principal, bob, uow):
    client_msg_id = uuid.uuid4()
    dto = SendMessageDTO(receiver_id=bob.id, text="hello", client_msg_id=client_msg_id)

    msg1, created1 = await message_service.send_message(alice_principal, dto, uow)
    uow._committed = False
    msg2, created2 = await message_service.send_message(alice_principal, dto, uow)

    assert created1 is True
    assert created2 is False
    assert msg1.id == msg2.id
    assert uow._committed is False
    assert len(uow.outbox._records) == 1


@pytest.mark.asyncio
async def test_send_message_writes_outbox(alice_principal, bob, uow):
    msg, _ = await message_service.send_message(
        alice_principal, SendMessageDTO(receiver_id=bob.id, text="test"), uow,
    )

    assert len(uow.outbox._records) == 1
    record = uow.outbox._records[0]
    assert record["event_type"] == ChatEvent.MESSAGE_CREATED
    assert set(record["payload"]["user_ids"]) == {str(alice_principal.user_id), str(bob.id)}
    assert record["payload"]["message"]["id"] == str(msg.id)


@pytest.mark.asyncio
async def test_send_empty_message_rejected(alice_principal, bob, uow):
    with pytest.raises(ValidationError):
        await message_service.send_message(
            alice_principal, SendMessageDTO(receiver_id=bob.id, text="  "), uow,
        )
    assert uow.outbox._records == []


@pytest.mark.asyncio
async def test_send_to_self_rejected(alice_principal, uow):
    with pytest.raises(ValidationError):
        await message_service.send_message(
            alice_principal,
            SendMessageDTO(receiver_id=alice_principal.user_id, text="me"),
            uow,
        )


@pytest.mark.asyncio
async def test_send_to_unknown_user(alice_principal, uow):
    with pytest.raises(NotFoundError):
        await message_service.send_message(
            alice_principal, SendMessageDTO(receiver_id=uuid.uuid4(), text="hi"), uow,
        )


@pytest.mark.asyncio
async def test_list_messages_only_returns_the_pair(alice_principal, alice, bob, uow):
    carol = make_user(full_name="Carol")
    uow.add_users(carol)
    m1 = make_message(sender_id=alice.id, receiver_id=bob.id, text="1", created_at=minutes(1))
    m2 = make_message(sender_id=bob.id, receiver_id=alice.id, text="2", created_at=minutes(2))
    other = make_message(sender_id=carol.id, receiver_id=alice.id, text="x", created_at=minutes(3))
    uow.messages._messages.extend([m2, other, m1])

    result = await message_service.list_messages(alice_principal, bob.id, None, 50, uow)

    assert [m.id for m in result] == [m1.id, m2.id]


@pytest.mark.asyncio
async def test_update_message(alice_principal, alice, bob, uow):
    original = make_message(sender_id=alice.id, receiver_id=bob.id, text="helo")
    uow.messages._messages.append(original)

    updated = await message_service.update_message(alice_principal, original.id, " hello ", uow)

    assert updated.text == "hello"
    assert updated.edited is True
    assert (await uow.messages.get_by_id(original.id)).text == "hello"
    assert uow._committed is True
    assert uow.outbox._records[-1]["event_type"] == ChatEvent.MESSAGE_UPDATED


@pytest.mark.asyncio
async def test_update_to_empty_text_without_image_rejected(alice_principal, alice, bob, uow):
    original = make_message(sender_id=alice.id, receiver_id=bob.id, text="hello")
    uow.messages._messages.append(original)

    with pytest.raises(ValidationError):
        await message_service.update_message(alice_principal, original.id, "   ", uow)
    assert (await uow.messages.get_by_id(original.id)).text == "hello"


@pytest.mark.asyncio
async def test_update_to_empty_text_with_image_allowed(alice_principal, alice, bob, uow):
    original = make_message(
        sender_id=alice.id, receiver_id=bob.id, text="caption", image="https://cdn/x.png",
    )
    uow.messages._messages.append(original)

    updated = await message_service.update_message(alice_principal, original.id, "", uow)

    assert updated.text is None
    assert updated.image == "https://cdn/x.png"


@pytest.mark.asyncio
async def test_receiver_cannot_edit(bob_principal, alice, bob, uow):
    original = make_message(sender_id=alice.id, receiver_id=bob.id)
    uow.messages._messages.append(original)

    with pytest.raises(ForbiddenError):
        await message_service.update_message(bob_principal, original.id, "mine now", uow)


@pytest.mark.asyncio
async def test_stranger_sees_not_found(alice, bob, uow):
    from direct_chat.application.dto.principal import Principal

    original = make_message(sender_id=alice.id, receiver_id=bob.id)
    uow.messages._messages.append(original)
    stranger = Principal(user_id=uuid.uuid4())

    with pytest.raises(NotFoundError):
        await message_service.update_message(stranger, original.id, "x", uow)
    with pytest.raises(NotFoundError):
        await message_service.delete_message(stranger, original.id, uow)


@pytest.mark.asyncio
async def test_edit_deleted_message_not_found(alice_principal, alice, bob, uow):
    original = make_message(sender_id=alice.id, receiver_id=bob.id, deleted=True)
    uow.messages._messages.append(original)

    with pytest.raises(NotFoundError):
        await message_service.update_message(alice_principal, original.id, "back", uow)


@pytest.mark.asyncio
async def test_delete_message_flags_it(alice_principal, alice, bob, uow):
    original = make_message(sender_id=alice.id, receiver_id=bob.id)
    uow.messages._messages.append(original)

    deleted = await message_service.delete_message(alice_principal, original.id, uow)

    assert deleted.deleted is True
    stored = await uow.messages.get_by_id(original.id)
    assert stored is not None and stored.deleted is True
    assert uow.outbox._records[-1]["event_type"] == ChatEvent.MESSAGE_DELETED


@pytest.mark.asyncio
async def test_delete_twice_is_idempotent(alice_principal, alice, bob, uow):
    original = make_message(sender_id=alice.id, receiver_id=bob.id)
    uow.messages._messages.append(original)

    first = await message_service.delete_message(alice_principal, original.id, uow)
    uow._committed = False
    second = await message_service.delete_message(alice_principal, original.id, uow)

    assert first.id == second.id
    assert second.deleted is True
    assert uow._committed is False
    assert len(uow.outbox._records) == 1


@pytest.mark.asyncio
async def test_delete_unknown_message():
    from direct_chat.application.dto.principal import Principal

    with pytest.raises(NotFoundError):
        await message_service.delete_message(Principal(user_id=uuid.uuid4()), uuid.uuid4(), FakeUoW())
