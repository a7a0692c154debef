"""Chat and message endpoints."""

from typing import Protocol

from ..config import MESSAGES_PAGE_SIZE
from ..models import Chat, Message, MessageKind, MessagePage, SearchResult
from .client import IApiClient
from .schemas import ChatPayload, MessagePagePayload, MessagePayload, SearchPayload


class IChatService(Protocol):
    """REST access to chats; the source of truth for transcripts."""

    async def get_user_chats(self) -> list[Chat]:
        ...

    async def get_chat(self, chat_id: str) -> Chat:
        ...

    async def send_message(
        self,
        chat_id: str,
        kind: MessageKind = MessageKind.TEXT,
        content: str | None = None,
        image_url: str | None = None,
        event_id: str | None = None,
        reply_to: str | None = None,
    ) -> Message:
        ...

    async def get_messages(
        self, chat_id: str, page: int = 1, limit: int = MESSAGES_PAGE_SIZE
    ) -> MessagePage:
        ...

    async def mark_messages_as_read(self, chat_id: str) -> None:
        ...

    async def delete_message(self, message_id: str) -> None:
        ...


class ChatService:
    """Chat endpoints under /chats and /messages."""

    def __init__(self, api: IApiClient):
        self._api = api

    async def get_user_chats(self) -> list[Chat]:
        """Get all chats for the user."""
        data = await self._api.get("/chats")
        return [ChatPayload.model_validate(c).to_domain() for c in data.get("chats", [])]

    async def get_or_create_direct_chat(self, other_user_id: str) -> Chat:
        data = await self._api.post("/chats/direct", json={"otherUserId": other_user_id})
        return ChatPayload.model_validate(data["chat"]).to_domain()

    async def create_group_chat(
        self,
        name: str,
        participant_ids: list[str],
        group_image: str | None = None,
    ) -> Chat:
        body = {"name": name, "participantIds": participant_ids}
        if group_image:
            body["groupImage"] = group_image
        data = await self._api.post("/chats/group", json=body)
        return ChatPayload.model_validate(data["chat"]).to_domain()

    async def get_chat(self, chat_id: str) -> Chat:
        data = await self._api.get(f"/chats/{chat_id}")
        return ChatPayload.model_validate(data["chat"]).to_domain()

    async def send_message(
        self,
        chat_id: str,
        kind: MessageKind = MessageKind.TEXT,
        content: str | None = None,
        image_url: str | None = None,
        event_id: str | None = None,
        reply_to: str | None = None,
    ) -> Message:
        """Send a message; returns the server-confirmed Message."""
        body: dict = {"type": kind.value}
        if content is not None:
            body["content"] = content
        if image_url is not None:
            body["imageUrl"] = image_url
        if event_id is not None:
            body["eventId"] = event_id
        if reply_to is not None:
            body["replyTo"] = reply_to

        data = await self._api.post(f"/chats/{chat_id}/messages", json=body)
        return MessagePayload.model_validate(data["data"]).to_domain()

    async def get_messages(
        self, chat_id: str, page: int = 1, limit: int = MESSAGES_PAGE_SIZE
    ) -> MessagePage:
        """Get one page of history (oldest first within the page)."""
        data = await self._api.get(
            f"/chats/{chat_id}/messages", params={"page": page, "limit": limit}
        )
        return MessagePagePayload.model_validate(data).to_domain()

    async def mark_messages_as_read(self, chat_id: str) -> None:
        await self._api.put(f"/chats/{chat_id}/read")

    async def delete_message(self, message_id: str) -> None:
        await self._api.delete(f"/messages/{message_id}")

    async def search(self, query: str) -> SearchResult:
        """Search chats and messages."""
        data = await self._api.get("/chats/search", params={"query": query})
        return SearchPayload.model_validate(data).to_domain()
