"""Event exploration and ticket endpoints."""

from ..config import EVENTS_PAGE_SIZE
from ..models import EventPage, Ticket
from .client import IApiClient
from .schemas import EventPayload, TicketPayload


class EventService:
    def __init__(self, api: IApiClient):
        self._api = api

    async def explore_public_events(
        self, page: int = 1, limit: int = EVENTS_PAGE_SIZE
    ) -> EventPage:
        """Get one page of public events."""
        data = await self._api.get(
            "/events/public/explore", params={"page": page, "limit": limit}
        )
        events = [EventPayload.model_validate(e).to_domain() for e in data.get("events", [])]
        return EventPage(
            events=events,
            total=data.get("total", len(events)),
            page=page,
            limit=limit,
        )

    async def join_event(self, event_id: str) -> None:
        """Join a free event."""
        await self._api.post(f"/events/{event_id}/join")

    async def get_tickets(self) -> list[Ticket]:
        data = await self._api.get("/tickets")
        return [TicketPayload.model_validate(t).to_domain() for t in data.get("tickets", [])]
