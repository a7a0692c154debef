"""Tests for wire payload parsing."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from fakes import ALICE, BOB, chat_doc, message_doc
from nightvibe.models import AccountType, ChatKind, MessageKind, MessageStatus
from nightvibe.rest.schemas import (
    AuthPayload,
    ChatPayload,
    TicketPayload,
    UserPayload,
    parse_message,
)


class TestMessagePayload:
    """Tests for message documents."""

    def test_parse_pushed_message(self):
        message = parse_message(message_doc("m1", "c1", BOB, "hello", status="delivered"))

        assert message.id == "m1"
        assert message.chat_id == "c1"
        assert message.sender.username == "bob"
        assert message.kind == MessageKind.TEXT
        assert message.status == MessageStatus.DELIVERED
        assert message.created_at.tzinfo is not None

    def test_timestamp_without_offset_is_utc(self):
        doc = message_doc("m1")
        doc["createdAt"] = "2024-06-01T20:00:00"

        message = parse_message(doc)

        assert message.created_at == datetime(2024, 6, 1, 20, 0, tzinfo=timezone.utc)

    def test_populated_chat_collapses_to_id(self):
        doc = message_doc("m1")
        doc["chat"] = {"_id": "c1", "type": "direct"}

        assert parse_message(doc).chat_id == "c1"

    def test_reply_to_with_unpopulated_sender(self):
        """Test that a replyTo document with a bare sender id parses."""
        doc = message_doc("m2")
        reply = message_doc("m1")
        reply["sender"] = "u1"
        doc["replyTo"] = reply

        message = parse_message(doc)

        assert message.reply_to.id == "m1"
        assert message.reply_to.sender.id == "u1"

    def test_reply_to_bare_id_is_dropped(self):
        doc = message_doc("m2")
        doc["replyTo"] = "m1"

        assert parse_message(doc).reply_to is None

    def test_missing_sender_is_invalid(self):
        doc = message_doc("m1")
        del doc["sender"]

        with pytest.raises(ValidationError):
            parse_message(doc)


class TestChatPayload:
    """Tests for chat documents."""

    def test_unpopulated_last_message_is_dropped(self):
        chat = ChatPayload.model_validate(chat_doc("c1", last_message="m9")).to_domain()

        assert chat.last_message is None
        assert chat.kind == ChatKind.DIRECT
        assert [p.id for p in chat.participants] == ["u1", "u2"]

    def test_last_message_and_unread(self):
        doc = chat_doc("c1", last_message=message_doc("m1"), unread={"u1": 2})

        chat = ChatPayload.model_validate(doc).to_domain()

        assert chat.last_message.id == "m1"
        assert chat.unread_for("u1") == 2


class TestUserPayload:
    """Tests for user and auth documents."""

    def test_vendor_flag(self):
        assert UserPayload.model_validate({**ALICE, "isVendor": True}).to_domain().account_type == (
            AccountType.VENDOR
        )

    def test_vendor_user_type(self):
        user = UserPayload.model_validate({"_id": "u3", "userType": "vendor"}).to_domain()

        assert user.account_type == AccountType.VENDOR

    def test_auth_payload_with_plain_id(self):
        session = AuthPayload.model_validate(
            {"token": "t", "user": {"id": "u1", "username": "alice"}}
        ).to_domain()

        assert session.auth_token == "t"
        assert session.user.id == "u1"


class TestTicketPayload:
    def test_populated_event(self):
        ticket = TicketPayload.model_validate(
            {
                "_id": "t1",
                "event": {"_id": "e1", "title": "Rooftop"},
                "ticketPrice": 20,
                "ticketCode": "ABC123",
                "stripePaymentIntentId": "pi_1",
            }
        ).to_domain()

        assert ticket.event_id == "e1"
        assert ticket.event_title == "Rooftop"
        assert ticket.payment_intent_id == "pi_1"
