"""Tests for the payment flow."""

from unittest.mock import AsyncMock

import httpx
import pytest

from fakes import BASE_URL, FakePaymentSheet
from nightvibe.errors import NETWORK_ERROR_MESSAGE
from nightvibe.models import PaymentSheetError, PurchaseStatus
from nightvibe.payments import (
    MERCHANT_DISPLAY_NAME,
    PaymentController,
    fulfill,
    payment_intent_id_from_secret,
    purchase_guide,
    purchase_ticket,
)
from nightvibe.rest import ApiClient, PaymentService


@pytest.fixture
def controller(payment_service, payment_sheet, authed_store):
    return PaymentController(payment_service, payment_sheet, authed_store)


class TestPaymentIntentId:
    def test_strips_secret(self):
        assert payment_intent_id_from_secret("pi_123_secret_abc") == "pi_123"

    def test_plain_id(self):
        assert payment_intent_id_from_secret("pi_123") == "pi_123"


class TestPaymentController:
    """Tests for PaymentController.pay()."""

    async def test_success(self, controller, payment_sheet):
        result = await controller.pay_for_ticket("e1")

        assert result.success
        assert result.payment_intent_id == "pi_123"
        assert result.error is None
        assert payment_sheet.init_calls == [("pi_123_secret_abc", MERCHANT_DISPLAY_NAME)]
        assert payment_sheet.presented == 1

    async def test_not_authenticated(self, store, backend, payment_sheet):
        client = ApiClient(BASE_URL, store, transport=httpx.ASGITransport(app=backend.app))
        controller = PaymentController(PaymentService(client), payment_sheet, store)

        result = await controller.pay_for_ticket("e1")

        assert not result.success
        assert result.error == "Not authenticated"
        assert backend.requests == []
        assert payment_sheet.init_calls == []
        await client.aclose()

    async def test_server_message(self, controller, backend):
        backend.intent_error = (400, "Tickets sold out")

        result = await controller.pay_for_ticket("e1")

        assert result.error == "Tickets sold out"

    async def test_server_without_message(self, controller, backend):
        backend.intent_error = (500, None)

        result = await controller.pay_for_guide("g1")

        assert result.error == "Payment setup failed"

    async def test_missing_client_secret(self, controller, backend, payment_sheet):
        backend.client_secret = None

        result = await controller.pay_for_ticket("e1")

        assert not result.success
        assert result.error == "Payment setup failed"
        assert payment_sheet.init_calls == []

    async def test_empty_intent_body(self, payment_sheet, authed_store):
        api = AsyncMock()
        api.post.return_value = {}
        controller = PaymentController(PaymentService(api), payment_sheet, authed_store)

        result = await controller.pay_for_ticket("e1")

        assert result.error == "Payment setup failed"

    async def test_network_failure(self, authed_store, payment_sheet):
        def refuse(request):
            raise httpx.ConnectError("unreachable", request=request)

        client = ApiClient(BASE_URL, authed_store, transport=httpx.MockTransport(refuse))
        controller = PaymentController(PaymentService(client), payment_sheet, authed_store)

        result = await controller.pay_for_ticket("e1")

        assert result.error == NETWORK_ERROR_MESSAGE
        await client.aclose()

    async def test_init_error(self, payment_service, authed_store):
        sheet = FakePaymentSheet(init_error=PaymentSheetError("Failed", "Invalid client secret"))
        controller = PaymentController(payment_service, sheet, authed_store)

        result = await controller.pay_for_ticket("e1")

        assert result.error == "Invalid client secret"
        assert sheet.presented == 0

    async def test_cancel_is_silent(self, payment_service, authed_store):
        """Test that user cancellation is not an error."""
        sheet = FakePaymentSheet(present_error=PaymentSheetError("Canceled", "The payment was canceled"))
        controller = PaymentController(payment_service, sheet, authed_store)

        result = await controller.pay_for_ticket("e1")

        assert not result.success
        assert result.error is None
        assert result.payment_intent_id is None

    async def test_declined(self, payment_service, authed_store):
        sheet = FakePaymentSheet(present_error=PaymentSheetError("Failed", "Your card was declined."))
        controller = PaymentController(payment_service, sheet, authed_store)

        result = await controller.pay_for_ticket("e1")

        assert result.error == "Your card was declined."

    async def test_sheet_exception(self, payment_service, authed_store):
        sheet = FakePaymentSheet()
        sheet.present = AsyncMock(side_effect=RuntimeError("sheet crashed"))
        controller = PaymentController(payment_service, sheet, authed_store)

        result = await controller.pay_for_ticket("e1")

        assert not result.success
        assert result.error == "Payment failed"


class TestPurchase:
    """Tests for pay-then-confirm purchases."""

    async def test_ticket_purchase(self, controller, payment_service, backend):
        outcome = await purchase_ticket(controller, payment_service, "e1", "Rooftop Party")

        assert outcome.status == PurchaseStatus.SUCCEEDED
        assert outcome.alert_title == "Success!"
        assert outcome.alert_message == 'You\'re going to "Rooftop Party"! Check your tickets.'
        assert backend.confirmations == [("ticket", "e1", "pi_123")]

    async def test_guide_purchase(self, controller, payment_service, backend):
        outcome = await purchase_guide(controller, payment_service, "g1", "Austin After Dark")

        assert outcome.status == PurchaseStatus.SUCCEEDED
        assert backend.confirmations == [("guide", "g1", "pi_123")]

    async def test_cancel_shows_nothing(self, payment_service, authed_store, backend):
        sheet = FakePaymentSheet(present_error=PaymentSheetError("Canceled", "canceled"))
        controller = PaymentController(payment_service, sheet, authed_store)

        outcome = await purchase_ticket(controller, payment_service, "e1", "Rooftop Party")

        assert outcome.status == PurchaseStatus.CANCELLED
        assert not outcome.should_alert
        assert backend.confirmations == []

    async def test_payment_failure_alert(self, controller, payment_service, backend):
        backend.intent_error = (400, "Event has ended")

        outcome = await purchase_ticket(controller, payment_service, "e1", "Rooftop Party")

        assert outcome.status == PurchaseStatus.PAYMENT_FAILED
        assert outcome.alert_title == "Payment Failed"
        assert outcome.alert_message == "Event has ended"

    async def test_paid_but_not_fulfilled(self, controller, payment_service, backend):
        """Test that a failed confirm after payment points the user at support."""
        backend.confirm_error = (500, "Ticket service unavailable")

        outcome = await purchase_ticket(controller, payment_service, "e1", "Rooftop Party")

        assert outcome.status == PurchaseStatus.FULFILLMENT_FAILED
        assert outcome.payment_intent_id == "pi_123"
        assert "Payment succeeded" in outcome.alert_message
        assert "contact support" in outcome.alert_message
        assert "Ticket service unavailable" in outcome.alert_message

    async def test_fulfillment_retry(self, controller, payment_service, backend):
        backend.confirm_error = (500, None)
        outcome = await purchase_ticket(controller, payment_service, "e1", "Rooftop Party")
        backend.confirm_error = None

        retried = await fulfill(
            lambda: payment_service.confirm_ticket("e1", outcome.payment_intent_id),
            item="ticket",
            success_message="ok",
            payment_intent_id=outcome.payment_intent_id,
        )

        assert retried.status == PurchaseStatus.SUCCEEDED
        assert backend.confirmations == [("ticket", "e1", "pi_123")]
