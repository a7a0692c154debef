"""Application bootstrap and lifecycle management."""

from typing import Callable, Protocol

import httpx
import socketio

from .chat import ChatListViewModel, ChatViewModel
from .config import Settings, resolve_db_path
from .logging_config import get_logger
from .models import Session, User
from .payments import PaymentController, PaymentSheet
from .realtime import IRealtimeChannel, RealtimeChannel, create_socket_client
from .rest import (
    ApiClient,
    AuthService,
    ChatService,
    EventService,
    PaymentService,
    VendorService,
)
from .storage import CredentialStore, ICredentialStore

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    async def login(self, email: str, password: str) -> Session:
        """Authenticate and open the realtime connection."""
        ...

    async def logout(self) -> None:
        """Close the realtime connection and drop the session."""
        ...


class Application:
    """Main application bootstrap."""

    def __init__(
        self,
        settings: Settings | None = None,
        payment_sheet: PaymentSheet | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        socket_client_factory: Callable[[], socketio.AsyncClient] = create_socket_client,
    ):
        self._settings = settings or Settings.from_env()
        self._db_path = resolve_db_path(self._settings.db_path)
        self._payment_sheet = payment_sheet
        self._transport = transport
        self._socket_client_factory = socket_client_factory

        # Components (will be initialized in start())
        self._store: ICredentialStore | None = None
        self._api: ApiClient | None = None
        self._auth: AuthService | None = None
        self._chats: ChatService | None = None
        self._events: EventService | None = None
        self._vendors: VendorService | None = None
        self._payments: PaymentService | None = None
        self._channel: RealtimeChannel | None = None
        self._payment_controller: PaymentController | None = None
        self._session: Session | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application against %s", self._settings.api_url)

        # 1. Credential store (no dependencies)
        self._store = CredentialStore(self._db_path)
        await self._store.init()
        logger.info("Credential store initialized")

        # 2. REST client (reads the token from the store)
        self._api = ApiClient(
            self._settings.api_url,
            self._store,
            timeout=self._settings.http_timeout,
            transport=self._transport,
        )

        # 3. Services (depend on the REST client)
        self._auth = AuthService(self._api, self._store)
        self._chats = ChatService(self._api)
        self._events = EventService(self._api)
        self._vendors = VendorService(self._api)
        self._payments = PaymentService(self._api)
        logger.info("REST services initialized")

        # 4. Realtime channel (depends on the store for the token)
        self._channel = RealtimeChannel(
            self._settings.socket_url,
            self._store,
            client_factory=self._socket_client_factory,
        )

        # 5. Payment controller (needs a platform payment sheet)
        if self._payment_sheet is not None:
            self._payment_controller = PaymentController(
                self._payments, self._payment_sheet, self._store
            )

        # Resume a persisted session
        self._session = await self._store.load_session()
        if self._session is not None:
            logger.info("Resuming session for %s", self._session.user.id)
            await self._channel.connect()

        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._channel:
            await self._channel.disconnect()
        if self._api:
            await self._api.aclose()
            logger.info("REST client closed")
        if self._store:
            await self._store.close()
            logger.info("Credential store closed")

    async def login(self, email: str, password: str) -> Session:
        self._session = await self.auth.login(email, password)
        await self.channel.connect()
        return self._session

    async def register(self, username: str, email: str, password: str) -> Session:
        self._session = await self.auth.register(username, email, password)
        await self.channel.connect()
        return self._session

    async def logout(self) -> None:
        await self.channel.disconnect()
        await self.auth.logout()
        self._session = None

    def open_chat(self, chat_id: str) -> ChatViewModel:
        """Create the view-model for a chat screen; call activate() on it."""
        return ChatViewModel(chat_id, self.chats, self.channel, self.current_user)

    def chat_list(self) -> ChatListViewModel:
        return ChatListViewModel(self.chats, self.channel, self.current_user)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def current_user(self) -> User:
        """Get the logged-in user."""
        if not self._session:
            raise RuntimeError("Not logged in")
        return self._session.user

    @property
    def store(self) -> ICredentialStore:
        """Get credential store instance."""
        if not self._store:
            raise RuntimeError("Application not started")
        return self._store

    @property
    def auth(self) -> AuthService:
        if not self._auth:
            raise RuntimeError("Application not started")
        return self._auth

    @property
    def chats(self) -> ChatService:
        if not self._chats:
            raise RuntimeError("Application not started")
        return self._chats

    @property
    def events(self) -> EventService:
        if not self._events:
            raise RuntimeError("Application not started")
        return self._events

    @property
    def vendors(self) -> VendorService:
        if not self._vendors:
            raise RuntimeError("Application not started")
        return self._vendors

    @property
    def payments(self) -> PaymentService:
        if not self._payments:
            raise RuntimeError("Application not started")
        return self._payments

    @property
    def channel(self) -> IRealtimeChannel:
        """Get realtime channel instance."""
        if not self._channel:
            raise RuntimeError("Application not started")
        return self._channel

    @property
    def payment_controller(self) -> PaymentController:
        if not self._payment_controller:
            if self._store is None:
                raise RuntimeError("Application not started")
            raise RuntimeError("No payment sheet configured")
        return self._payment_controller
