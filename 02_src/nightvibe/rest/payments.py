"""Stripe payment-intent and purchase confirmation endpoints."""

from typing import Protocol

from ..errors import InvalidResponseError
from .client import IApiClient


class IPaymentService(Protocol):
    async def create_intent(self, resource: str, resource_id: str) -> str:
        """Create a payment intent; returns its client secret."""
        ...

    async def confirm(self, resource: str, resource_id: str, payment_intent_id: str) -> dict:
        """Mark the purchase fulfilled server-side."""
        ...


class PaymentService:
    """Endpoints under /stripe for tickets and guides."""

    TICKET = "ticket"
    GUIDE = "guide"

    def __init__(self, api: IApiClient):
        self._api = api

    async def create_intent(self, resource: str, resource_id: str) -> str:
        data = await self._api.post(f"/stripe/payment-intent/{resource}/{resource_id}")
        client_secret = data.get("clientSecret") if isinstance(data, dict) else None
        if not isinstance(client_secret, str) or not client_secret:
            raise InvalidResponseError("Payment intent response has no client secret")
        return client_secret

    async def confirm(self, resource: str, resource_id: str, payment_intent_id: str) -> dict:
        return await self._api.post(
            f"/stripe/confirm/{resource}/{resource_id}",
            json={"paymentIntentId": payment_intent_id},
        )

    async def create_ticket_intent(self, event_id: str) -> str:
        return await self.create_intent(self.TICKET, event_id)

    async def create_guide_intent(self, guide_id: str) -> str:
        return await self.create_intent(self.GUIDE, guide_id)

    async def confirm_ticket(self, event_id: str, payment_intent_id: str) -> dict:
        return await self.confirm(self.TICKET, event_id, payment_intent_id)

    async def confirm_guide(self, guide_id: str, payment_intent_id: str) -> dict:
        return await self.confirm(self.GUIDE, guide_id, payment_intent_id)
