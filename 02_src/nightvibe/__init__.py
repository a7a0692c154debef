"""NightVibe client core: auth, chat, realtime and payments."""

from .app import Application, IApplication
from .chat import ChatListViewModel, ChatViewModel, Transcript
from .config import Settings
from .errors import (
    InvalidResponseError,
    NightVibeError,
    NotAuthenticatedError,
    ServerRejectedError,
    TransportError,
)
from .payments import PaymentController, PaymentSheet, purchase_guide, purchase_ticket
from .realtime import IRealtimeChannel, RealtimeChannel, RealtimeEvent
from .storage import CredentialStore, ICredentialStore

__all__ = [
    # Application
    "Application",
    "IApplication",
    "Settings",
    # Errors
    "NightVibeError",
    "NotAuthenticatedError",
    "InvalidResponseError",
    "ServerRejectedError",
    "TransportError",
    # Components
    "CredentialStore",
    "ICredentialStore",
    "IRealtimeChannel",
    "RealtimeChannel",
    "RealtimeEvent",
    "ChatViewModel",
    "ChatListViewModel",
    "Transcript",
    "PaymentController",
    "PaymentSheet",
    "purchase_ticket",
    "purchase_guide",
]
