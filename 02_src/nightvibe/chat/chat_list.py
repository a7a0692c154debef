"""Chat list view-model: last message and unread counters across chats."""

from datetime import datetime, timezone
from typing import Any

from ..errors import user_facing_message
from ..logging_config import get_logger
from ..models import Chat, User
from ..realtime import IRealtimeChannel, RealtimeEvent, Unsubscribe
from ..rest import IChatService
from ..rest.schemas import parse_message

logger = get_logger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _last_activity(chat: Chat) -> datetime:
    if chat.last_message is not None:
        return chat.last_message.created_at
    return chat.updated_at or _EPOCH


class ChatListViewModel:
    """Subscribes on the wildcard scope so it coexists with open chat screens."""

    def __init__(self, chats: IChatService, channel: IRealtimeChannel, current_user: User):
        self._chats_api = chats
        self._channel = channel
        self._user = current_user
        self._chats: dict[str, Chat] = {}
        self._open_chat_id: str | None = None
        self._subscriptions: list[Unsubscribe] = []
        self._seen: set[str] = set()
        self.loading = False
        self.error: str | None = None

    def chats(self) -> list[Chat]:
        """Chats ordered by last activity, newest first."""
        return sorted(self._chats.values(), key=_last_activity, reverse=True)

    def get(self, chat_id: str) -> Chat | None:
        return self._chats.get(chat_id)

    @property
    def total_unread(self) -> int:
        return sum(chat.unread_for(self._user.id) for chat in self._chats.values())

    async def load(self) -> None:
        self.loading = True
        self.error = None
        try:
            chats = await self._chats_api.get_user_chats()
        except Exception as e:
            logger.error("Error loading chats: %s", e, exc_info=True)
            self.error = user_facing_message(e, "Failed to load chats")
            return
        finally:
            self.loading = False

        self._chats = {chat.id: chat for chat in chats}
        self._seen.update(chat.last_message.id for chat in chats if chat.last_message)

    def start(self) -> None:
        if self._subscriptions:
            return
        self._subscriptions = [
            self._channel.subscribe(RealtimeEvent.MESSAGE_NEW, self._handle_new_message),
            self._channel.subscribe(RealtimeEvent.MESSAGE_READ, self._handle_message_read),
        ]

    def stop(self) -> None:
        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions.clear()

    def mark_opened(self, chat_id: str) -> None:
        """Zero the unread counter for a chat the user just opened."""
        self._open_chat_id = chat_id
        chat = self._chats.get(chat_id)
        if chat is not None:
            chat.unread_count[self._user.id] = 0

    def mark_closed(self) -> None:
        self._open_chat_id = None

    async def _handle_new_message(self, payload: Any) -> None:
        try:
            message = parse_message(payload)
        except ValueError as e:
            logger.warning("Ignoring malformed message push: %s", e)
            return

        chat = self._chats.get(message.chat_id)
        if chat is None:
            logger.debug("Push for unknown chat %s", message.chat_id)
            return

        if message.id in self._seen:
            return
        self._seen.add(message.id)

        last = chat.last_message
        if last is None or message.sort_key > last.sort_key:
            chat.last_message = message

        if message.sender.id != self._user.id and message.chat_id != self._open_chat_id:
            chat.unread_count[self._user.id] = chat.unread_for(self._user.id) + 1

    async def _handle_message_read(self, payload: dict) -> None:
        if payload.get("userId") != self._user.id:
            return
        chat = self._chats.get(payload.get("chatId"))
        if chat is not None:
            chat.unread_count[self._user.id] = 0
