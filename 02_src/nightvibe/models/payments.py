"""Payment flow data models."""

from dataclasses import dataclass
from enum import Enum

CANCELED_CODE = "Canceled"


@dataclass
class PaymentSheetError:
    """Error reported by the third-party payment sheet."""

    code: str
    message: str

    @property
    def is_cancellation(self) -> bool:
        return self.code == CANCELED_CODE


@dataclass
class PaymentResult:
    """Outcome of a payment attempt; ends at "payment succeeded"."""

    success: bool
    payment_intent_id: str | None = None
    error: str | None = None


class PurchaseStatus(str, Enum):
    """Outcome of pay-then-confirm purchase."""

    SUCCEEDED = "succeeded"
    CANCELLED = "cancelled"
    PAYMENT_FAILED = "payment_failed"
    FULFILLMENT_FAILED = "fulfillment_failed"


@dataclass
class PurchaseOutcome:
    """What the UI should show after a purchase attempt."""

    status: PurchaseStatus
    alert_title: str | None = None
    alert_message: str | None = None
    payment_intent_id: str | None = None

    @property
    def should_alert(self) -> bool:
        return self.alert_message is not None
