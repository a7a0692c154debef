"""Deduplicated, time-ordered chat transcript."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from ..models import (
    Confirmed,
    DeliveryState,
    Failed,
    Message,
    MessageKind,
    MessageStatus,
    Pending,
    User,
)


@dataclass(frozen=True)
class Draft:
    """What the user asked to send; replayed as-is on retry."""

    kind: MessageKind = MessageKind.TEXT
    content: str | None = None
    image_url: str | None = None
    event_id: str | None = None
    reply_to: str | None = None


@dataclass
class TranscriptEntry:
    """A message plus where it stands in the local send lifecycle."""

    message: Message
    delivery: DeliveryState
    draft: Draft | None = None

    @property
    def key(self) -> str:
        if isinstance(self.delivery, Confirmed):
            return self.delivery.id
        return self.delivery.temp_id

    @property
    def state(self) -> str:
        """pending, failed, or the server status (sent/delivered/read)."""
        if isinstance(self.delivery, Pending):
            return "pending"
        if isinstance(self.delivery, Failed):
            return "failed"
        return self.message.status.value


def advance_status(message: Message, status: MessageStatus) -> bool:
    """Move status forward only; returns whether it changed."""
    if status.rank > message.status.rank:
        message.status = status
        return True
    return False


def _same_payload(local: Message, pushed: Message) -> bool:
    return (
        local.sender.id == pushed.sender.id
        and local.kind == pushed.kind
        and local.content == pushed.content
        and local.image_url == pushed.image_url
        and local.event_id == pushed.event_id
    )


class Transcript:
    """Messages of one chat keyed by id (temp id for local entries).

    Merging is idempotent and order-independent, so history pages and
    realtime pushes can arrive in any order.
    """

    def __init__(self, chat_id: str):
        self.chat_id = chat_id
        self._entries: dict[str, TranscriptEntry] = {}
        # temp id -> server id for sends whose push arrived before the reply
        self._settled: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str) -> TranscriptEntry | None:
        return self._entries.get(key)

    def entries(self) -> list[TranscriptEntry]:
        """All entries sorted by (created_at, id)."""
        return sorted(self._entries.values(), key=lambda e: e.message.sort_key)

    def messages(self, include_deleted: bool = False) -> list[Message]:
        return [
            e.message
            for e in self.entries()
            if include_deleted or not e.message.is_deleted
        ]

    def merge(self, messages: Iterable[Message]) -> int:
        """Insert unknown messages, advance status of known ones.

        Returns the number of messages added.
        """
        added = 0
        for message in messages:
            if message.chat_id != self.chat_id:
                continue
            existing = self._entries.get(message.id)
            if existing is not None:
                advance_status(existing.message, message.status)
                continue
            self._entries[message.id] = TranscriptEntry(
                message=message, delivery=Confirmed(message.id)
            )
            added += 1
        return added

    def add_pending(
        self,
        temp_id: str,
        sender: User,
        draft: Draft,
        created_at: datetime | None = None,
    ) -> TranscriptEntry:
        """Append an optimistic local message."""
        if temp_id in self._entries:
            raise ValueError(f"Duplicate temporary id: {temp_id}")

        message = Message(
            id=temp_id,
            chat_id=self.chat_id,
            sender=sender,
            kind=draft.kind,
            content=draft.content or "",
            created_at=created_at or datetime.now(timezone.utc),
            image_url=draft.image_url,
            event_id=draft.event_id,
        )
        entry = TranscriptEntry(message=message, delivery=Pending(temp_id), draft=draft)
        self._entries[temp_id] = entry
        return entry

    def confirm(self, temp_id: str, message: Message) -> None:
        """Replace a local entry with the server-confirmed message."""
        if self._settled.pop(temp_id, None) is None:
            entry = self._entries.get(temp_id)
            if entry is None or isinstance(entry.delivery, Confirmed):
                raise KeyError(temp_id)
            del self._entries[temp_id]

        # The push for this message may already have landed
        if message.id in self._entries:
            advance_status(self._entries[message.id].message, message.status)
            return

        self._entries[message.id] = TranscriptEntry(
            message=message, delivery=Confirmed(message.id)
        )

    def reconcile_echo(self, message: Message) -> str | None:
        """Swap the oldest matching pending entry for a pushed copy of it.

        Covers the push of our own message landing before the send
        returns. Returns the replaced temp id, or None if nothing matched.
        """
        if message.chat_id != self.chat_id or message.id in self._entries:
            return None
        for entry in self.entries():
            if not isinstance(entry.delivery, Pending):
                continue
            if not _same_payload(entry.message, message):
                continue
            temp_id = entry.key
            del self._entries[temp_id]
            self._entries[message.id] = TranscriptEntry(
                message=message, delivery=Confirmed(message.id)
            )
            self._settled[temp_id] = message.id
            return temp_id
        return None

    def fail(self, temp_id: str, reason: str) -> None:
        """Mark a pending entry as failed."""
        if self._settled.pop(temp_id, None) is not None:
            # The server already pushed this message back to us
            return
        entry = self._entries[temp_id]
        if not isinstance(entry.delivery, Pending):
            raise ValueError(f"{temp_id} is not pending")
        entry.delivery = Failed(temp_id, reason)

    def retry(self, temp_id: str) -> TranscriptEntry:
        """Move a failed entry back to pending; returns it for re-sending."""
        entry = self._entries[temp_id]
        if not isinstance(entry.delivery, Failed):
            raise ValueError(f"{temp_id} has not failed")
        entry.delivery = Pending(temp_id)
        return entry

    def apply_status(self, message_id: str, status: MessageStatus) -> bool:
        entry = self._entries.get(message_id)
        if entry is None or not isinstance(entry.delivery, Confirmed):
            return False
        return advance_status(entry.message, status)

    def mark_read_by(self, reader_id: str) -> int:
        """Mark every confirmed message not sent by the reader as read."""
        changed = 0
        for entry in self._entries.values():
            if not isinstance(entry.delivery, Confirmed):
                continue
            if entry.message.sender.id == reader_id:
                continue
            if advance_status(entry.message, MessageStatus.READ):
                changed += 1
        return changed

    def soft_delete(self, message_id: str) -> bool:
        entry = self._entries.get(message_id)
        if entry is None:
            return False
        entry.message.is_deleted = True
        return True

    def failed(self) -> list[TranscriptEntry]:
        return [e for e in self.entries() if isinstance(e.delivery, Failed)]
