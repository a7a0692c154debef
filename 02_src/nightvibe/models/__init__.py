"""Core data models for NightVibe."""

from .session import AccountType, Session, User
from .chat import (
    Chat,
    ChatKind,
    Confirmed,
    DeliveryState,
    Failed,
    Message,
    MessageKind,
    MessagePage,
    MessageStatus,
    Pagination,
    Pending,
    SearchResult,
)
from .events import Event, EventPage, Ticket
from .vendors import City, Vendor, VendorStats, VendorType
from .payments import (
    PaymentResult,
    PaymentSheetError,
    PurchaseOutcome,
    PurchaseStatus,
)

__all__ = [
    # Session
    "AccountType",
    "Session",
    "User",
    # Chat
    "Chat",
    "ChatKind",
    "Message",
    "MessageKind",
    "MessageStatus",
    "MessagePage",
    "Pagination",
    "SearchResult",
    "Pending",
    "Confirmed",
    "Failed",
    "DeliveryState",
    # Events
    "Event",
    "EventPage",
    "Ticket",
    # Vendors
    "City",
    "VendorType",
    "Vendor",
    "VendorStats",
    # Payments
    "PaymentResult",
    "PaymentSheetError",
    "PurchaseOutcome",
    "PurchaseStatus",
]
