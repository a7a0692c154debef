"""Login, signup and profile endpoints."""

from ..logging_config import get_logger
from ..models import Session, User
from ..storage import ICredentialStore
from .client import IApiClient
from .schemas import AuthPayload, UserPayload

logger = get_logger(__name__)


class AuthService:
    """Creates and destroys the persisted Session."""

    def __init__(self, api: IApiClient, store: ICredentialStore):
        self._api = api
        self._store = store

    async def login(self, email: str, password: str) -> Session:
        """Authenticate and persist the returned token and user."""
        data = await self._api.post(
            "/login", auth=False, json={"email": email, "password": password}
        )
        session = AuthPayload.model_validate(data).to_domain()
        await self._store.save_session(session)
        logger.info("Logged in as %s", session.user.id)
        return session

    async def register(self, username: str, email: str, password: str) -> Session:
        """Create an account and persist the returned session."""
        data = await self._api.post(
            "/register",
            auth=False,
            json={"username": username, "email": email, "password": password},
        )
        session = AuthPayload.model_validate(data).to_domain()
        await self._store.save_session(session)
        logger.info("Registered %s", session.user.id)
        return session

    async def logout(self) -> None:
        """Destroy the persisted session."""
        await self._store.clear_session()
        logger.info("Logged out")

    async def get_profile(self) -> User:
        data = await self._api.get("/profile")
        payload = data.get("user", data) if isinstance(data, dict) else data
        return UserPayload.model_validate(payload).to_domain()
