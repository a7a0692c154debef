"""Realtime channel manager on top of python-socketio."""

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Protocol

import socketio
from socketio.exceptions import ConnectionError as SocketConnectionError
from socketio.exceptions import SocketIOError

from ..config import RECONNECT_ATTEMPTS, RECONNECT_DELAY_SECONDS
from ..logging_config import get_logger
from ..storage import ICredentialStore
from .registry import (
    OutboundEvent,
    RealtimeEvent,
    RealtimeHandler,
    SubscriberRegistry,
    Unsubscribe,
)

logger = get_logger(__name__)


# Keyword names accepted by RealtimeChannel.on()
CALLBACK_EVENTS = {
    "new_message": RealtimeEvent.MESSAGE_NEW,
    "message_read": RealtimeEvent.MESSAGE_READ,
    "message_delivered": RealtimeEvent.MESSAGE_DELIVERED,
    "typing_start": RealtimeEvent.TYPING_START,
    "typing_stop": RealtimeEvent.TYPING_STOP,
    "user_online": RealtimeEvent.USER_ONLINE,
    "user_offline": RealtimeEvent.USER_OFFLINE,
}


@dataclass
class ChannelState:
    """Snapshot of the realtime connection."""

    connected: bool
    socket_id: str | None = None


def create_socket_client() -> socketio.AsyncClient:
    """Socket.IO client with bounded, fixed-delay reconnects."""
    return socketio.AsyncClient(
        reconnection=True,
        reconnection_attempts=RECONNECT_ATTEMPTS,
        reconnection_delay=RECONNECT_DELAY_SECONDS,
        reconnection_delay_max=RECONNECT_DELAY_SECONDS,
        randomization_factor=0,
        logger=False,
        engineio_logger=False,
    )


class IRealtimeChannel(Protocol):
    """Single authenticated duplex connection; advisory signalling only."""

    @property
    def state(self) -> ChannelState:
        ...

    async def connect(self) -> bool:
        """Open the authenticated connection if a token is stored."""
        ...

    async def disconnect(self) -> None:
        """Close the connection and drop every subscriber."""
        ...

    def subscribe(
        self,
        event: RealtimeEvent,
        handler: RealtimeHandler,
        chat_id: str | None = None,
    ) -> Unsubscribe:
        ...

    async def join_chat(self, chat_id: str) -> bool:
        ...

    async def leave_chat(self, chat_id: str) -> bool:
        ...

    async def send_typing(self, chat_id: str, is_typing: bool) -> bool:
        ...

    async def mark_delivered(self, message_id: str) -> bool:
        ...

    async def mark_messages_as_read(self, chat_id: str, user_id: str) -> bool:
        ...


class RealtimeChannel:
    """Owns at most one Socket.IO connection and fans pushes out to subscribers.

    Nothing here raises to the caller: connection failures are logged and
    emits report whether they were sent.
    """

    def __init__(
        self,
        url: str,
        store: ICredentialStore,
        client_factory: Callable[[], socketio.AsyncClient] = create_socket_client,
        registry: SubscriberRegistry | None = None,
    ):
        self._url = url
        self._store = store
        self._client_factory = client_factory
        self._registry = registry or SubscriberRegistry()
        self._sio: socketio.AsyncClient | None = None
        self._lock = asyncio.Lock()
        self._callbacks: dict[RealtimeEvent, Unsubscribe] = {}

    @property
    def state(self) -> ChannelState:
        if self._sio is None or not self._sio.connected:
            return ChannelState(connected=False)
        return ChannelState(connected=True, socket_id=self._sio.sid)

    @property
    def registry(self) -> SubscriberRegistry:
        return self._registry

    async def connect(self) -> bool:
        """Open the authenticated connection; no-op without a token or if connected."""
        async with self._lock:
            if self._sio is not None and self._sio.connected:
                return True

            token = await self._store.get_token()
            if not token:
                logger.info("No auth token, realtime connection deferred")
                return False

            if self._sio is not None:
                # Reconnect attempts were exhausted; start over with a fresh client
                await self._sio.shutdown()
                self._sio = None

            sio = self._client_factory()
            self._register_handlers(sio)

            try:
                await sio.connect(
                    self._url,
                    auth={"token": token},
                    transports=["websocket"],
                )
            except (SocketConnectionError, OSError) as e:
                logger.error("Socket connection error: %s", e)
                return False

            self._sio = sio
            logger.info("Socket connected: %s", sio.sid)
            return True

    async def disconnect(self) -> None:
        """Tear down the connection and drop every subscriber."""
        async with self._lock:
            if self._sio is not None:
                await self._sio.shutdown()
                self._sio = None
                logger.info("Socket disconnected")
            self._callbacks.clear()
            self._registry.clear()

    def subscribe(
        self,
        event: RealtimeEvent,
        handler: RealtimeHandler,
        chat_id: str | None = None,
    ) -> Unsubscribe:
        """Register a handler for one chat, or for all chats when chat_id is None."""
        return self._registry.subscribe(event, handler, chat_id)

    def on(self, **callbacks: RealtimeHandler) -> None:
        """Merge named callbacks; a later callback replaces one with the same name."""
        for name, handler in callbacks.items():
            event = CALLBACK_EVENTS.get(name)
            if event is None:
                raise TypeError(f"Unknown realtime callback: {name}")
            previous = self._callbacks.pop(event, None)
            if previous:
                previous()
            self._callbacks[event] = self._registry.subscribe(event, handler)

    def off(self) -> None:
        """Clear callbacks registered with on(); the connection stays open."""
        for unsubscribe in self._callbacks.values():
            unsubscribe()
        self._callbacks.clear()

    async def join_chat(self, chat_id: str) -> bool:
        return await self._emit(OutboundEvent.CHAT_JOIN, chat_id)

    async def leave_chat(self, chat_id: str) -> bool:
        return await self._emit(OutboundEvent.CHAT_LEAVE, chat_id)

    async def send_typing(self, chat_id: str, is_typing: bool) -> bool:
        event = OutboundEvent.TYPING_START if is_typing else OutboundEvent.TYPING_STOP
        return await self._emit(event, {"chatId": chat_id})

    async def mark_delivered(self, message_id: str) -> bool:
        return await self._emit(OutboundEvent.MESSAGE_DELIVERED, {"messageId": message_id})

    async def mark_messages_as_read(self, chat_id: str, user_id: str) -> bool:
        return await self._emit(
            OutboundEvent.MESSAGE_READ, {"chatId": chat_id, "userId": user_id}
        )

    async def _emit(self, event: OutboundEvent, data: Any) -> bool:
        """Best-effort emit; returns whether it was handed to the transport."""
        sio = self._sio
        if sio is None or not sio.connected:
            logger.debug("Skipping %s: not connected", event.value)
            return False

        try:
            await sio.emit(event.value, data)
        except SocketIOError as e:
            logger.warning("Emit %s failed: %s", event.value, e)
            return False
        return True

    def _register_handlers(self, sio: socketio.AsyncClient) -> None:
        async def on_connect() -> None:
            logger.info("Socket connected")

        async def on_disconnect(*args: Any) -> None:
            logger.info("Socket disconnected")

        async def on_connect_error(data: Any) -> None:
            logger.error("Socket error: %s", data)

        sio.on("connect", on_connect)
        sio.on("disconnect", on_disconnect)
        sio.on("connect_error", on_connect_error)

        for event in RealtimeEvent:
            sio.on(event.value, self._make_dispatcher(event))

    def _make_dispatcher(self, event: RealtimeEvent) -> RealtimeHandler:
        async def dispatch(data: Any) -> None:
            await self._registry.dispatch(event, data)

        return dispatch
