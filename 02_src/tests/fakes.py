"""In-process fakes: backend API, Socket.IO client, realtime channel, payment sheet."""

import asyncio
import itertools
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse
from socketio.exceptions import ConnectionError as SocketConnectionError

from nightvibe.models import PaymentSheetError
from nightvibe.realtime import ChannelState, SubscriberRegistry

BASE_URL = "http://test/api"
BASE_TIME = datetime(2024, 6, 1, 20, 0, tzinfo=timezone.utc)

ALICE = {"_id": "u1", "username": "alice", "email": "alice@example.com", "isVendor": False}
BOB = {"_id": "u2", "username": "bob", "email": "bob@example.com", "isVendor": False}


def at(minutes: int) -> str:
    return (BASE_TIME + timedelta(minutes=minutes)).isoformat()


def message_doc(
    message_id: str,
    chat_id: str = "c1",
    sender: dict = BOB,
    content: str = "hi",
    minutes: int = 0,
    status: str = "sent",
) -> dict:
    """A message document shaped like the backend's populated Message."""
    return {
        "_id": message_id,
        "chat": chat_id,
        "sender": {"_id": sender["_id"], "username": sender["username"]},
        "type": "text",
        "content": content,
        "status": status,
        "isDeleted": False,
        "createdAt": at(minutes),
    }


def chat_doc(chat_id: str = "c1", last_message: dict | None = None, unread: dict | None = None) -> dict:
    return {
        "_id": chat_id,
        "type": "direct",
        "participants": [ALICE, BOB],
        "lastMessage": last_message,
        "unreadCount": unread or {},
        "updatedAt": at(0),
    }


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"message": message})


class FakeBackend:
    """Minimal NightVibe backend served over httpx.ASGITransport."""

    def __init__(self) -> None:
        self.token = "tok-alice"
        self.password = "secret"
        self.chats: dict[str, dict] = {"c1": chat_doc("c1"), "c2": chat_doc("c2")}
        self.messages: dict[str, list[dict]] = {"c1": [], "c2": []}
        self.events: list[dict] = []
        self.tickets: list[dict] = []
        self.client_secret: str | None = "pi_123_secret_abc"
        self.requests: list[tuple[str, str]] = []
        self.read_marks: list[str] = []
        self.confirmations: list[tuple[str, str, str]] = []
        self.send_error: tuple[int, str] | None = None
        self.intent_error: tuple[int, str] | None = None
        self.confirm_error: tuple[int, str] | None = None
        self._ids = itertools.count(100)
        self.app = self._build_app()

    def seed_messages(self, chat_id: str, count: int, sender: dict = BOB) -> list[dict]:
        docs = [
            message_doc(f"{chat_id}-m{i}", chat_id, sender, f"message {i}", minutes=i)
            for i in range(1, count + 1)
        ]
        self.messages[chat_id].extend(docs)
        return docs

    def _authorized(self, request: Request) -> bool:
        return request.headers.get("authorization") == f"Bearer {self.token}"

    def _build_app(self) -> FastAPI:
        app = FastAPI()
        router = APIRouter(prefix="/api")

        @app.middleware("http")
        async def record(request: Request, call_next):
            self.requests.append((request.method, request.url.path))
            return await call_next(request)

        @router.post("/login")
        async def login(request: Request):
            body = await request.json()
            if body.get("email") != ALICE["email"] or body.get("password") != self.password:
                return _error(401, "Invalid credentials")
            return {"token": self.token, "user": {**ALICE, "id": ALICE["_id"]}}

        @router.post("/register")
        async def register(request: Request):
            body = await request.json()
            if body.get("email") == ALICE["email"]:
                return _error(400, "User already exists")
            user = {"id": "u9", "username": body["username"], "email": body["email"]}
            return {"token": self.token, "user": user}

        @router.get("/profile")
        async def profile(request: Request):
            if not self._authorized(request):
                return _error(401, "Not authorized")
            return {"user": ALICE}

        @router.get("/chats")
        async def user_chats(request: Request):
            if not self._authorized(request):
                return _error(401, "Not authorized")
            return {"chats": list(self.chats.values())}

        @router.get("/chats/search")
        async def search(query: str):
            hits = [
                m for docs in self.messages.values() for m in docs if query in m["content"]
            ]
            return {"chats": [], "messages": hits}

        @router.post("/chats/direct")
        async def direct_chat(request: Request):
            body = await request.json()
            chat = chat_doc(f"direct-{body['otherUserId']}")
            self.chats[chat["_id"]] = chat
            self.messages.setdefault(chat["_id"], [])
            return {"chat": chat}

        @router.post("/chats/group")
        async def group_chat(request: Request):
            body = await request.json()
            if len(body.get("participantIds", [])) < 2:
                return _error(400, "Group chats need at least 2 other participants")
            chat = {**chat_doc(f"group-{next(self._ids)}"), "type": "group", "name": body["name"]}
            self.chats[chat["_id"]] = chat
            self.messages.setdefault(chat["_id"], [])
            return JSONResponse(status_code=201, content={"chat": chat})

        @router.get("/chats/{chat_id}")
        async def get_chat(chat_id: str):
            if chat_id not in self.chats:
                return _error(404, "Chat not found")
            return {"chat": self.chats[chat_id]}

        @router.get("/chats/{chat_id}/messages")
        async def get_messages(chat_id: str, page: int = 1, limit: int = 50):
            docs = sorted(self.messages.get(chat_id, []), key=lambda m: m["createdAt"], reverse=True)
            window = docs[(page - 1) * limit : page * limit]
            total = len(docs)
            return {
                "messages": list(reversed(window)),
                "pagination": {
                    "page": page,
                    "limit": limit,
                    "total": total,
                    "totalPages": -(-total // limit),
                },
            }

        @router.post("/chats/{chat_id}/messages")
        async def send_message(chat_id: str, request: Request):
            if self.send_error:
                return _error(*self.send_error)
            body = await request.json()
            doc = message_doc(
                f"m{next(self._ids)}",
                chat_id,
                ALICE,
                body.get("content", ""),
                minutes=len(self.messages[chat_id]) + 1,
            )
            doc["type"] = body.get("type", "text")
            if "imageUrl" in body:
                doc["imageUrl"] = body["imageUrl"]
            if "eventId" in body:
                doc["event"] = body["eventId"]
            self.messages[chat_id].append(doc)
            return JSONResponse(status_code=201, content={"data": doc})

        @router.put("/chats/{chat_id}/read")
        async def mark_read(chat_id: str):
            self.read_marks.append(chat_id)
            return {"success": True}

        @router.delete("/messages/{message_id}")
        async def delete_message(message_id: str):
            for docs in self.messages.values():
                for doc in docs:
                    if doc["_id"] == message_id:
                        doc["isDeleted"] = True
                        return {"message": "Message deleted"}
            return _error(404, "Message not found")

        @router.get("/events/public/explore")
        async def explore(page: int = 1, limit: int = 10):
            window = self.events[(page - 1) * limit : page * limit]
            return {"events": window, "total": len(self.events)}

        @router.post("/events/{event_id}/join")
        async def join_event(event_id: str):
            return {"message": "Joined"}

        @router.get("/tickets")
        async def tickets():
            return {"tickets": self.tickets}

        @router.get("/cities")
        async def cities():
            return [{"_id": "city1", "name": "Austin", "state": "TX"}]

        @router.get("/cities/{city_id}/vendor-types")
        async def vendor_types(city_id: str):
            return {"vendorTypes": [{"_id": "vt1", "name": "Clubs", "icon": "music"}]}

        @router.get("/cities/{city_id}/vendors/{vendor_type_id}")
        async def vendors(city_id: str, vendor_type_id: str):
            return [
                {
                    "_id": "v1",
                    "name": "Neon Room",
                    "vendorType": {"_id": vendor_type_id, "name": "Clubs"},
                    "city": city_id,
                    "priceRange": 3,
                    "rating": 4.5,
                    "verified": True,
                }
            ]

        @router.get("/vendor/stats")
        async def vendor_stats(request: Request):
            if not self._authorized(request):
                return _error(401, "Not authorized")
            return {"totalEvents": 4, "ticketsSold": 12}

        @router.post("/stripe/payment-intent/{resource}/{resource_id}")
        async def payment_intent(resource: str, resource_id: str, request: Request):
            if not self._authorized(request):
                return _error(401, "Not authorized")
            if self.intent_error:
                return _error(*self.intent_error)
            return {"clientSecret": self.client_secret}

        @router.post("/stripe/confirm/{resource}/{resource_id}")
        async def confirm(resource: str, resource_id: str, request: Request):
            if self.confirm_error:
                return _error(*self.confirm_error)
            body = await request.json()
            self.confirmations.append((resource, resource_id, body["paymentIntentId"]))
            return {"success": True}

        app.include_router(router)
        return app


class FakeSocketClient:
    """Stands in for socketio.AsyncClient."""

    def __init__(self, fail_connect: bool = False):
        self.connected = False
        self.sid: str | None = None
        self.fail_connect = fail_connect
        self.handlers: dict = {}
        self.emitted: list[tuple[str, object]] = []
        self.connect_calls: list[dict] = []
        self.shutdown_calls = 0

    def on(self, event, handler=None, namespace=None):
        self.handlers[event] = handler

    async def connect(self, url, auth=None, transports=None, **kwargs):
        self.connect_calls.append({"url": url, "auth": auth, "transports": transports})
        await asyncio.sleep(0)
        if self.fail_connect:
            raise SocketConnectionError("Connection refused by the server")
        self.connected = True
        self.sid = f"sid-{len(self.connect_calls)}"

    async def emit(self, event, data=None, **kwargs):
        self.emitted.append((event, data))

    async def shutdown(self):
        self.shutdown_calls += 1
        self.connected = False

    async def push(self, event: str, data) -> None:
        """Simulate a server push."""
        await self.handlers[event](data)


class SocketFactory:
    """Client factory that records every client it creates."""

    def __init__(self, fail_connect: bool = False):
        self.fail_connect = fail_connect
        self.clients: list[FakeSocketClient] = []

    def __call__(self) -> FakeSocketClient:
        client = FakeSocketClient(fail_connect=self.fail_connect)
        self.clients.append(client)
        return client

    @property
    def last(self) -> FakeSocketClient:
        return self.clients[-1]


class FakeChannel:
    """Realtime channel with a real registry and mocked emits."""

    def __init__(self) -> None:
        self.registry = SubscriberRegistry()
        self.connect = AsyncMock(return_value=True)
        self.disconnect = AsyncMock()
        self.join_chat = AsyncMock(return_value=True)
        self.leave_chat = AsyncMock(return_value=True)
        self.send_typing = AsyncMock(return_value=True)
        self.mark_delivered = AsyncMock(return_value=True)
        self.mark_messages_as_read = AsyncMock(return_value=True)

    @property
    def state(self) -> ChannelState:
        return ChannelState(connected=self.connect.await_count > self.disconnect.await_count)

    def subscribe(self, event, handler, chat_id=None):
        return self.registry.subscribe(event, handler, chat_id)

    async def push(self, event, payload) -> None:
        await self.registry.dispatch(event, payload)


class FakePaymentSheet:
    """Payment sheet that returns preset errors."""

    def __init__(
        self,
        init_error: PaymentSheetError | None = None,
        present_error: PaymentSheetError | None = None,
    ):
        self.init_error = init_error
        self.present_error = present_error
        self.init_calls: list[tuple[str, str]] = []
        self.presented = 0

    async def init(self, client_secret: str, merchant_display_name: str):
        self.init_calls.append((client_secret, merchant_display_name))
        return self.init_error

    async def present(self):
        self.presented += 1
        return self.present_error
