"""Subscriber registry for server-pushed realtime events."""

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable

from ..logging_config import get_logger

logger = get_logger(__name__)


RealtimeHandler = Callable[[Any], Awaitable[None]]
Unsubscribe = Callable[[], None]


class RealtimeEvent(str, Enum):
    """Inbound (server -> client) events."""

    MESSAGE_NEW = "message:new"
    MESSAGE_READ = "message:read"
    MESSAGE_DELIVERED = "message:delivered"
    TYPING_START = "typing:start"
    TYPING_STOP = "typing:stop"
    USER_ONLINE = "user:online"
    USER_OFFLINE = "user:offline"


class OutboundEvent(str, Enum):
    """Outbound (client -> server) events."""

    CHAT_JOIN = "chat:join"
    CHAT_LEAVE = "chat:leave"
    TYPING_START = "typing:start"
    TYPING_STOP = "typing:stop"
    MESSAGE_DELIVERED = "message:delivered"
    MESSAGE_READ = "message:read"


CHAT_SCOPED_EVENTS = frozenset(
    {
        RealtimeEvent.MESSAGE_NEW,
        RealtimeEvent.MESSAGE_READ,
        RealtimeEvent.TYPING_START,
        RealtimeEvent.TYPING_STOP,
    }
)


def chat_id_of(event: RealtimeEvent, payload: Any) -> str | None:
    """Extract the chat a pushed payload belongs to."""
    if event not in CHAT_SCOPED_EVENTS or not isinstance(payload, dict):
        return None
    if event == RealtimeEvent.MESSAGE_NEW:
        chat = payload.get("chat")
        if isinstance(chat, dict):
            return chat.get("_id") or chat.get("id")
        return chat
    return payload.get("chatId")


class SubscriberRegistry:
    """Maps (event, chat id) to handlers.

    A chat id of ``None`` is the wildcard scope: those handlers receive the
    event for every chat, and are the only scope for non-chat events.
    """

    def __init__(self) -> None:
        self._handlers: dict[tuple[RealtimeEvent, str | None], list[RealtimeHandler]] = {}

    def subscribe(
        self,
        event: RealtimeEvent,
        handler: RealtimeHandler,
        chat_id: str | None = None,
    ) -> Unsubscribe:
        """Register a handler; returns a callable that removes it."""
        if chat_id is not None and event not in CHAT_SCOPED_EVENTS:
            raise ValueError(f"{event.value} is not scoped to a chat")

        key = (event, chat_id)
        self._handlers.setdefault(key, []).append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(key)
            if handlers and handler in handlers:
                handlers.remove(handler)
                if not handlers:
                    del self._handlers[key]

        return unsubscribe

    def handlers_for(self, event: RealtimeEvent, chat_id: str | None) -> list[RealtimeHandler]:
        handlers = []
        if chat_id is not None:
            handlers.extend(self._handlers.get((event, chat_id), []))
        handlers.extend(self._handlers.get((event, None), []))
        return handlers

    async def dispatch(self, event: RealtimeEvent, payload: Any) -> None:
        """Call matching handlers concurrently; errors are logged, not raised."""
        handlers = self.handlers_for(event, chat_id_of(event, payload))
        if not handlers:
            return

        results = await asyncio.gather(
            *[handler(payload) for handler in handlers],
            return_exceptions=True,
        )

        for i, result in enumerate(results):
            if isinstance(result, Exception):
                logger.error("Error in %s handler %s: %s", event.value, i, result)

    def clear(self) -> None:
        """Remove every handler."""
        self._handlers.clear()
