"""Chat and message data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .session import User


class ChatKind(str, Enum):
    """Chat types."""

    DIRECT = "direct"
    GROUP = "group"


class MessageKind(str, Enum):
    """Message content types."""

    TEXT = "text"
    IMAGE = "image"
    EVENT = "event"
    SYSTEM = "system"


class MessageStatus(str, Enum):
    """Server-reported delivery status, ordered sent < delivered < read."""

    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]


_STATUS_RANK = {
    MessageStatus.SENT: 0,
    MessageStatus.DELIVERED: 1,
    MessageStatus.READ: 2,
}


@dataclass
class Message:
    """A single chat message."""

    id: str
    chat_id: str
    sender: User
    kind: MessageKind
    content: str
    created_at: datetime
    status: MessageStatus = MessageStatus.SENT
    image_url: str | None = None
    event_id: str | None = None
    reply_to: "Message | None" = None
    is_deleted: bool = False

    @property
    def sort_key(self) -> tuple[datetime, str]:
        """Transcript order: createdAt, ties broken by id."""
        return (self.created_at, self.id)


@dataclass(frozen=True)
class Pending:
    """Local message waiting for the server to accept it."""

    temp_id: str


@dataclass(frozen=True)
class Confirmed:
    """Message the server has assigned an id to."""

    id: str


@dataclass(frozen=True)
class Failed:
    """Local message whose send failed; can be retried."""

    temp_id: str
    reason: str


DeliveryState = Pending | Confirmed | Failed


@dataclass
class Chat:
    """A direct or group chat as cached by the client."""

    id: str
    kind: ChatKind
    participants: list[User] = field(default_factory=list)
    name: str | None = None
    group_image: str | None = None
    last_message: Message | None = None
    unread_count: dict[str, int] = field(default_factory=dict)
    updated_at: datetime | None = None

    def unread_for(self, user_id: str) -> int:
        return self.unread_count.get(user_id, 0)

    def display_name(self, current_user_id: str) -> str:
        """Group name, or the other participant's username for direct chats."""
        if self.kind == ChatKind.GROUP:
            return self.name or "Group Chat"
        for participant in self.participants:
            if participant.id != current_user_id:
                return participant.username
        return "User"


@dataclass
class Pagination:
    """Pagination block returned alongside paged lists."""

    page: int
    limit: int
    total: int
    total_pages: int

    @property
    def has_more(self) -> bool:
        return self.page < self.total_pages


@dataclass
class MessagePage:
    """One page of chat history, oldest first."""

    messages: list[Message]
    pagination: Pagination


@dataclass
class SearchResult:
    """Chats and messages matching a search query."""

    chats: list[Chat] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)
