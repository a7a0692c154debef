"""REST client layer."""

from .auth import AuthService
from .chats import ChatService, IChatService
from .client import ApiClient, IApiClient
from .events import EventService
from .payments import IPaymentService, PaymentService
from .vendors import VendorService

__all__ = [
    "ApiClient",
    "IApiClient",
    "AuthService",
    "ChatService",
    "IChatService",
    "EventService",
    "VendorService",
    "PaymentService",
    "IPaymentService",
]
