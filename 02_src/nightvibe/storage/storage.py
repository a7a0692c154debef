"""SQLite-backed credential store."""

import json
from enum import Enum
from pathlib import Path
from typing import Protocol

import aiosqlite

from ..config import resolve_db_path
from ..logging_config import get_logger
from ..models import AccountType, Session, User

logger = get_logger(__name__)


class StorageKey(str, Enum):
    """Opaque keys for persisted local state."""

    TOKEN = "token"
    USER = "user"
    HAS_SEEN_ONBOARDING = "hasSeenOnboarding"
    ACTIVE_ACCOUNT = "activeAccount"


class ICredentialStore(Protocol):
    """Persistent on-device storage for the auth token and cached profile."""

    async def init(self) -> None:
        """Open the database and create tables."""
        ...

    async def close(self) -> None:
        """Close database connection."""
        ...

    async def get_item(self, key: str) -> str | None:
        """Read a raw value."""
        ...

    async def set_item(self, key: str, value: str) -> None:
        """Write a raw value."""
        ...

    async def delete_item(self, key: str) -> None:
        """Remove a raw value."""
        ...

    async def get_token(self) -> str | None:
        """Get the stored auth token."""
        ...

    async def save_session(self, session: Session) -> None:
        """Persist token and user."""
        ...

    async def load_session(self) -> Session | None:
        """Load the persisted session, if complete."""
        ...

    async def clear_session(self) -> None:
        """Remove token and user."""
        ...


class CredentialStore:
    """Key/value store on SQLite, standing in for secure device storage."""

    def __init__(self, db_path: str | Path | None = None):
        self._db_path = resolve_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None

    async def init(self) -> None:
        """Open the database and create tables."""
        self._conn = await aiosqlite.connect(self._db_path)

        schema_path = Path(__file__).parent / "schema.sql"
        with open(schema_path, "r", encoding="utf-8") as f:
            schema_sql = f.read()
        await self._conn.executescript(schema_sql)
        await self._conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    # Raw items
    async def get_item(self, key: str) -> str | None:
        """Read a raw value."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        cursor = await self._conn.execute(
            "SELECT value FROM secure_items WHERE key = ?",
            (key,),
        )
        row = await cursor.fetchone()
        return row[0] if row else None

    async def set_item(self, key: str, value: str) -> None:
        """Write a raw value."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        await self._conn.execute(
            """
            INSERT OR REPLACE INTO secure_items (key, value, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
            """,
            (key, value),
        )
        await self._conn.commit()

    async def delete_item(self, key: str) -> None:
        """Remove a raw value."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        await self._conn.execute("DELETE FROM secure_items WHERE key = ?", (key,))
        await self._conn.commit()

    # Session
    async def get_token(self) -> str | None:
        """Get the stored auth token."""
        return await self.get_item(StorageKey.TOKEN.value)

    async def get_user(self) -> User | None:
        """Get the cached user profile."""
        raw = await self.get_item(StorageKey.USER.value)
        if not raw:
            return None
        try:
            return User.from_dict(json.loads(raw))
        except (ValueError, KeyError) as e:
            logger.warning("Discarding unreadable cached user: %s", e)
            return None

    async def save_session(self, session: Session) -> None:
        """Persist token and user."""
        await self.set_item(StorageKey.TOKEN.value, session.auth_token)
        await self.set_item(StorageKey.USER.value, json.dumps(session.user.to_dict()))

    async def load_session(self) -> Session | None:
        """Load the persisted session, if complete."""
        token = await self.get_token()
        if not token:
            return None
        user = await self.get_user()
        if not user:
            return None
        return Session(auth_token=token, user=user)

    async def clear_session(self) -> None:
        """Remove token and user."""
        await self.delete_item(StorageKey.TOKEN.value)
        await self.delete_item(StorageKey.USER.value)

    # Flags
    async def has_seen_onboarding(self) -> bool:
        return await self.get_item(StorageKey.HAS_SEEN_ONBOARDING.value) == "true"

    async def set_onboarding_seen(self) -> None:
        await self.set_item(StorageKey.HAS_SEEN_ONBOARDING.value, "true")

    async def get_active_account(self) -> AccountType:
        """Get the active account type, defaulting to client."""
        stored = await self.get_item(StorageKey.ACTIVE_ACCOUNT.value)
        if stored in (AccountType.CLIENT.value, AccountType.VENDOR.value):
            return AccountType(stored)
        return AccountType.CLIENT

    async def set_active_account(self, account_type: AccountType) -> None:
        await self.set_item(StorageKey.ACTIVE_ACCOUNT.value, account_type.value)

    # Lifecycle
    async def clear(self) -> None:
        """Clear all data."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        await self._conn.execute("DELETE FROM secure_items")
        await self._conn.commit()
