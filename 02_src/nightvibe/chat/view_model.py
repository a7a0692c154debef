"""Chat view-model: history, pushes and optimistic sends for one open chat."""

import itertools
from typing import Any, Callable

from ..config import MESSAGES_PAGE_SIZE
from ..errors import user_facing_message
from ..logging_config import get_logger
from ..models import Chat, Message, MessageKind, MessageStatus, User
from ..realtime import IRealtimeChannel, RealtimeEvent, Unsubscribe
from ..rest import IChatService
from ..rest.schemas import parse_message
from .transcript import Draft, Transcript, TranscriptEntry

logger = get_logger(__name__)


ChangeListener = Callable[[], None]


class ChatViewModel:
    """State behind a chat screen.

    The transcript survives deactivation so re-entering the chat is
    instant; only the subscriptions and room membership are dropped.
    """

    def __init__(
        self,
        chat_id: str,
        chats: IChatService,
        channel: IRealtimeChannel,
        current_user: User,
        page_size: int = MESSAGES_PAGE_SIZE,
    ):
        self.chat_id = chat_id
        self._chats = chats
        self._channel = channel
        self._user = current_user
        self._page_size = page_size

        self.transcript = Transcript(chat_id)
        self.chat: Chat | None = None
        self.loading = False
        self.error: str | None = None
        self.typing_users: set[str] = set()

        self._active = False
        self._page = 0
        self._has_more = True
        self._subscriptions: list[Unsubscribe] = []
        self._listeners: list[ChangeListener] = []
        self._temp_ids = itertools.count(1)

    @property
    def active(self) -> bool:
        return self._active

    @property
    def has_more(self) -> bool:
        return self._has_more

    def messages(self) -> list[Message]:
        return self.transcript.messages()

    def on_change(self, listener: ChangeListener) -> Unsubscribe:
        """Register a listener called after each visible state change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Lifecycle
    async def activate(self) -> None:
        """Subscribe, load history page 1, join the room and mark as read."""
        if self._active:
            return
        self._active = True

        # Subscribe first so pushes racing the history fetch are kept
        self._subscribe()

        self.loading = True
        self.error = None
        self._notify()
        try:
            self.chat = await self._chats.get_chat(self.chat_id)
            page = await self._chats.get_messages(self.chat_id, page=1, limit=self._page_size)
            self.transcript.merge(page.messages)
            self._page = 1
            self._has_more = page.pagination.has_more
        except Exception as e:
            logger.error("Error loading chat %s: %s", self.chat_id, e, exc_info=True)
            self.error = user_facing_message(e, "Failed to load chat")
        finally:
            self.loading = False
            self._notify()

        await self._channel.join_chat(self.chat_id)
        if self.error is None:
            await self.mark_visible()

    async def deactivate(self) -> None:
        """Leave the room and stop feeding updates; the transcript is kept."""
        if not self._active:
            return
        self._active = False

        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions.clear()
        self.typing_users.clear()

        await self._channel.leave_chat(self.chat_id)

    async def load_more(self) -> int:
        """Merge the next history page; returns how many messages were new."""
        if not self._has_more or self.loading:
            return 0

        self.loading = True
        try:
            page = await self._chats.get_messages(
                self.chat_id, page=self._page + 1, limit=self._page_size
            )
        except Exception as e:
            logger.error("Error loading more messages: %s", e, exc_info=True)
            self.error = user_facing_message(e, "Failed to load messages")
            return 0
        finally:
            self.loading = False

        self._page += 1
        self._has_more = page.pagination.has_more
        added = self.transcript.merge(page.messages)
        self._notify()
        return added

    # Sending
    async def send_text(self, content: str) -> Message | None:
        content = content.strip()
        if not content:
            return None
        return await self._send(Draft(kind=MessageKind.TEXT, content=content))

    async def send_image(self, image_url: str) -> Message | None:
        return await self._send(Draft(kind=MessageKind.IMAGE, image_url=image_url))

    async def send_event(self, event_id: str) -> Message | None:
        return await self._send(Draft(kind=MessageKind.EVENT, event_id=event_id))

    async def retry(self, temp_id: str) -> Message | None:
        """Re-issue a failed send with its original payload."""
        entry = self.transcript.retry(temp_id)
        self._notify()
        return await self._deliver(entry)

    async def _send(self, draft: Draft) -> Message | None:
        temp_id = f"tmp-{next(self._temp_ids)}"
        entry = self.transcript.add_pending(temp_id, self._user, draft)
        self._notify()
        return await self._deliver(entry)

    async def _deliver(self, entry: TranscriptEntry) -> Message | None:
        temp_id = entry.key
        draft = entry.draft
        try:
            message = await self._chats.send_message(
                self.chat_id,
                kind=draft.kind,
                content=draft.content,
                image_url=draft.image_url,
                event_id=draft.event_id,
                reply_to=draft.reply_to,
            )
        except Exception as e:
            logger.error("Error sending message: %s", e, exc_info=True)
            self.transcript.fail(temp_id, user_facing_message(e, "Failed to send message"))
            self._notify()
            return None

        self.transcript.confirm(temp_id, message)
        self._notify()
        return message

    async def delete_message(self, message_id: str) -> bool:
        try:
            await self._chats.delete_message(message_id)
        except Exception as e:
            logger.error("Error deleting message: %s", e, exc_info=True)
            self.error = user_facing_message(e, "Failed to delete message")
            return False
        self.transcript.soft_delete(message_id)
        self._notify()
        return True

    # Read receipts and typing
    async def mark_visible(self) -> None:
        """Send read receipts and zero the local unread counter right away."""
        if self.chat is not None:
            self.chat.unread_count[self._user.id] = 0
        self._notify()

        await self._channel.mark_messages_as_read(self.chat_id, self._user.id)
        try:
            await self._chats.mark_messages_as_read(self.chat_id)
        except Exception as e:
            logger.warning("Mark as read failed for %s: %s", self.chat_id, e)

    async def typing(self, is_typing: bool) -> bool:
        return await self._channel.send_typing(self.chat_id, is_typing)

    # Realtime handlers
    def _subscribe(self) -> None:
        self._subscriptions = [
            self._channel.subscribe(
                RealtimeEvent.MESSAGE_NEW, self._handle_new_message, self.chat_id
            ),
            self._channel.subscribe(
                RealtimeEvent.MESSAGE_READ, self._handle_message_read, self.chat_id
            ),
            self._channel.subscribe(
                RealtimeEvent.TYPING_START, self._handle_typing_start, self.chat_id
            ),
            self._channel.subscribe(
                RealtimeEvent.TYPING_STOP, self._handle_typing_stop, self.chat_id
            ),
            self._channel.subscribe(
                RealtimeEvent.MESSAGE_DELIVERED, self._handle_delivered
            ),
        ]

    async def _handle_new_message(self, payload: Any) -> None:
        try:
            message = parse_message(payload)
        except ValueError as e:
            logger.warning("Ignoring malformed message push: %s", e)
            return

        if message.chat_id != self.chat_id:
            return

        if message.sender.id == self._user.id and self.transcript.reconcile_echo(message):
            self._notify()
            return

        if not self.transcript.merge([message]):
            return
        self.typing_users.discard(message.sender.id)
        self._notify()

        if message.sender.id != self._user.id:
            await self._channel.mark_delivered(message.id)
            if self._active:
                await self.mark_visible()

    async def _handle_message_read(self, payload: dict) -> None:
        reader_id = payload.get("userId")
        if not reader_id or reader_id == self._user.id:
            return
        if self.transcript.mark_read_by(reader_id):
            self._notify()

    async def _handle_delivered(self, payload: dict) -> None:
        message_id = payload.get("messageId")
        if message_id and self.transcript.apply_status(message_id, MessageStatus.DELIVERED):
            self._notify()

    async def _handle_typing_start(self, payload: dict) -> None:
        user_id = payload.get("userId")
        if user_id and user_id != self._user.id:
            self.typing_users.add(user_id)
            self._notify()

    async def _handle_typing_stop(self, payload: dict) -> None:
        user_id = payload.get("userId")
        if user_id in self.typing_users:
            self.typing_users.discard(user_id)
            self._notify()

    def _notify(self) -> None:
        if not self._active:
            return
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.error("Error in change listener: %s", e)
