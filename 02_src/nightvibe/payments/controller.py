"""Payment flow: create intent, present the payment sheet, confirm purchase."""

from typing import Awaitable, Callable, Protocol

from ..errors import (
    NETWORK_ERROR_MESSAGE,
    NightVibeError,
    NotAuthenticatedError,
    ServerRejectedError,
    TransportError,
)
from ..logging_config import get_logger
from ..models import PaymentResult, PaymentSheetError, PurchaseOutcome, PurchaseStatus
from ..rest import IPaymentService
from ..storage import ICredentialStore

logger = get_logger(__name__)

MERCHANT_DISPLAY_NAME = "NightVibe"
SUPPORT_MESSAGE = "Payment succeeded but {item} could not be issued. Please contact support."


class PaymentSheet(Protocol):
    """Third-party payment UI driven by a payment-intent client secret."""

    async def init(
        self, client_secret: str, merchant_display_name: str
    ) -> PaymentSheetError | None:
        """Prepare the sheet; returns an error or None."""
        ...

    async def present(self) -> PaymentSheetError | None:
        """Show the sheet and wait for the user; returns an error or None."""
        ...


def payment_intent_id_from_secret(client_secret: str) -> str:
    """Client secrets look like pi_xxx_secret_yyy; the id is the pi_xxx part."""
    return client_secret.split("_secret_")[0]


class PaymentController:
    """Turns "pay for X" into a single PaymentResult.

    The contract ends at "payment succeeded"; confirming the purchase
    server-side is the caller's job (see purchase_ticket / purchase_guide).
    """

    def __init__(
        self,
        payments: IPaymentService,
        sheet: PaymentSheet,
        store: ICredentialStore,
    ):
        self._payments = payments
        self._sheet = sheet
        self._store = store

    async def pay_for_ticket(self, event_id: str) -> PaymentResult:
        return await self.pay("ticket", event_id)

    async def pay_for_guide(self, guide_id: str) -> PaymentResult:
        return await self.pay("guide", guide_id)

    async def pay(self, resource: str, resource_id: str) -> PaymentResult:
        token = await self._store.get_token()
        if not token:
            return PaymentResult(success=False, error="Not authenticated")

        # 1. Create PaymentIntent on server
        try:
            client_secret = await self._payments.create_intent(resource, resource_id)
        except ServerRejectedError as e:
            return PaymentResult(
                success=False, error=e.server_message or "Payment setup failed"
            )
        except TransportError:
            return PaymentResult(success=False, error=NETWORK_ERROR_MESSAGE)
        except NotAuthenticatedError as e:
            return PaymentResult(success=False, error=str(e))

        # 2. Init payment sheet
        try:
            init_error = await self._sheet.init(client_secret, MERCHANT_DISPLAY_NAME)
        except Exception as e:
            logger.error("Payment sheet init failed: %s", e, exc_info=True)
            return PaymentResult(success=False, error="Payment setup failed")
        if init_error:
            return PaymentResult(success=False, error=init_error.message)

        # 3. Present sheet, user completes payment
        try:
            present_error = await self._sheet.present()
        except Exception as e:
            logger.error("Payment sheet failed: %s", e, exc_info=True)
            return PaymentResult(success=False, error="Payment failed")
        if present_error:
            if present_error.is_cancellation:
                logger.info("Payment for %s %s cancelled", resource, resource_id)
                return PaymentResult(success=False)
            return PaymentResult(success=False, error=present_error.message)

        payment_intent_id = payment_intent_id_from_secret(client_secret)
        logger.info("Payment %s succeeded for %s %s", payment_intent_id, resource, resource_id)
        return PaymentResult(success=True, payment_intent_id=payment_intent_id)


async def fulfill(
    confirm: Callable[[], Awaitable[dict]],
    item: str,
    success_message: str,
    payment_intent_id: str,
) -> PurchaseOutcome:
    """Confirm a paid purchase server-side.

    Safe to call again with the same payment intent after a
    FULFILLMENT_FAILED outcome.
    """
    try:
        await confirm()
    except NightVibeError as e:
        logger.error("Fulfillment failed for payment %s: %s", payment_intent_id, e)
        detail = e.server_message if isinstance(e, ServerRejectedError) else None
        message = SUPPORT_MESSAGE.format(item=item)
        if detail:
            message = f"{message} ({detail})"
        return PurchaseOutcome(
            status=PurchaseStatus.FULFILLMENT_FAILED,
            alert_title="Error",
            alert_message=message,
            payment_intent_id=payment_intent_id,
        )

    return PurchaseOutcome(
        status=PurchaseStatus.SUCCEEDED,
        alert_title="Success!",
        alert_message=success_message,
        payment_intent_id=payment_intent_id,
    )


def _unpaid_outcome(result: PaymentResult) -> PurchaseOutcome:
    if result.error:
        return PurchaseOutcome(
            status=PurchaseStatus.PAYMENT_FAILED,
            alert_title="Payment Failed",
            alert_message=result.error,
        )
    return PurchaseOutcome(status=PurchaseStatus.CANCELLED)


async def purchase_ticket(
    controller: PaymentController,
    payments: IPaymentService,
    event_id: str,
    event_title: str,
) -> PurchaseOutcome:
    """Pay for a ticket, then have the backend issue it."""
    result = await controller.pay_for_ticket(event_id)
    if not result.success:
        return _unpaid_outcome(result)

    return await fulfill(
        lambda: payments.confirm("ticket", event_id, result.payment_intent_id),
        item="ticket",
        success_message=f'You\'re going to "{event_title}"! Check your tickets.',
        payment_intent_id=result.payment_intent_id,
    )


async def purchase_guide(
    controller: PaymentController,
    payments: IPaymentService,
    guide_id: str,
    guide_title: str,
) -> PurchaseOutcome:
    """Pay for a guide, then have the backend unlock it."""
    result = await controller.pay_for_guide(guide_id)
    if not result.success:
        return _unpaid_outcome(result)

    return await fulfill(
        lambda: payments.confirm("guide", guide_id, result.payment_intent_id),
        item="guide",
        success_message=f'"{guide_title}" is now unlocked.',
        payment_intent_id=result.payment_intent_id,
    )
