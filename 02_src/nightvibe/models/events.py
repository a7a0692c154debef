"""Event and ticket data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Event:
    """A nightlife event as listed in explore."""

    id: str
    title: str
    date: datetime | None = None
    location: str = ""
    image: str | None = None
    description: str = ""
    is_public: bool = False
    is_paid: bool = False
    ticket_price: float | None = None
    tickets_remaining: int | None = None
    user_has_purchased: bool = False
    is_creator: bool = False

    @property
    def requires_payment(self) -> bool:
        return self.is_paid and bool(self.ticket_price)


@dataclass
class EventPage:
    """One page of public events."""

    events: list[Event]
    total: int
    page: int
    limit: int

    @property
    def has_more(self) -> bool:
        return len(self.events) == self.limit


@dataclass
class Ticket:
    """A purchased ticket."""

    id: str
    event_id: str
    ticket_price: float = 0.0
    is_valid: bool = True
    ticket_code: str | None = None
    payment_intent_id: str | None = None
    purchase_date: datetime | None = None
    event_title: str = ""
