"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "03_data"
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_DB_PATH = DATA_DIR / "nightvibe.db"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DEFAULT_API_URL = "https://nightvibe-backend.onrender.com/api"
DEFAULT_HTTP_TIMEOUT = 10.0

MESSAGES_PAGE_SIZE = 50
EVENTS_PAGE_SIZE = 10

# Realtime reconnect policy: bounded attempts, fixed delay
RECONNECT_ATTEMPTS = 5
RECONNECT_DELAY_SECONDS = 1


PathLike = Union[str, Path]


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve NIGHTVIBE_DB_PATH to an absolute path."""
    if not env_value:
        DATA_DIR.mkdir(parents=True, exist_ok=True)
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def socket_url_for(api_url: str) -> str:
    """Derive the realtime server URL from the REST base URL."""
    return api_url.replace("/api", "").rstrip("/")


@dataclass
class Settings:
    """Runtime settings for the client core."""

    api_url: str = DEFAULT_API_URL
    socket_url: str | None = None
    db_path: PathLike | None = None
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        self.api_url = self.api_url.rstrip("/")
        if not self.socket_url:
            self.socket_url = socket_url_for(self.api_url)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from NIGHTVIBE_* environment variables."""
        return cls(
            api_url=os.getenv("NIGHTVIBE_API_URL") or DEFAULT_API_URL,
            socket_url=os.getenv("NIGHTVIBE_SOCKET_URL") or None,
            db_path=os.getenv("NIGHTVIBE_DB_PATH") or None,
            http_timeout=float(
                os.getenv("NIGHTVIBE_HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT))
            ),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
