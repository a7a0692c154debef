"""Payment flow module."""

from .controller import (
    MERCHANT_DISPLAY_NAME,
    PaymentController,
    PaymentSheet,
    fulfill,
    payment_intent_id_from_secret,
    purchase_guide,
    purchase_ticket,
)

__all__ = [
    "MERCHANT_DISPLAY_NAME",
    "PaymentController",
    "PaymentSheet",
    "fulfill",
    "payment_intent_id_from_secret",
    "purchase_guide",
    "purchase_ticket",
]
