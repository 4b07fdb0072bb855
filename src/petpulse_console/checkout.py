"""
Checkout of the cart's appointments.

The backend creates a payment intent for the cart's appointment ids; the card
itself is confirmed with the payment provider outside the console. Once the
provider reports the intent as succeeded, the cart is emptied.
"""

import logging
from typing import Dict, Optional

from .api.client import PetPulseClient
from .cart import CartStore
from .exceptions import (
    AuthenticationException,
    PetPulseException,
    ValidationException,
)
from .notifications import Notifier
from .schemas.payment import PaymentIntent, PaymentIntentRequest
from .utils.validation import (
    ErrorMessageFormatter,
    validate_email,
    validate_payer_name,
)

logger = logging.getLogger(__name__)

PAYMENT_SUCCEEDED = "succeeded"


class Checkout:
    """Drives one checkout of a cart."""

    def __init__(
        self,
        cart: CartStore,
        client: PetPulseClient,
        currency: Optional[str] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.cart = cart
        self.client = client
        self.currency = (currency or client.config.currency).lower()
        self.notifier = notifier or Notifier()
        self.intent: Optional[PaymentIntent] = None

    @property
    def is_ready(self) -> bool:
        """Whether a payment intent exists to confirm against."""
        return self.intent is not None

    async def start(self) -> Optional[PaymentIntent]:
        """
        Create the payment intent for every appointment in the cart.

        Returns:
            The intent, or None when nothing could be sent or the backend
            refused it (a notification says which)

        Raises:
            AuthenticationException: The session expired; it has been cleared
        """
        if not self.cart:
            self.notifier.info("Your cart is empty.")
            return None

        appointment_ids = self.cart.ids()
        if not appointment_ids:
            self.notifier.error("Cart items have no appointment ids")
            return None

        request = PaymentIntentRequest(
            appointment_ids=appointment_ids, currency=self.currency
        )
        try:
            self.intent = await self.client.create_payment_intent(request)
        except AuthenticationException:
            self.notifier.error("Session expired. Please log in again.")
            raise
        except PetPulseException as e:
            e.log_error(logger)
            self.notifier.error("Failed to start payment")
            return None
        if self.intent.currency:
            self.currency = self.intent.currency.lower()
        logger.info(
            "Payment intent created",
            extra={"appointments": len(request.appointment_ids), "currency": self.currency},
        )
        return self.intent

    def billing_details(self, full_name: str, email: str) -> Dict[str, str]:
        """
        Validated billing details for the card confirmation.

        Raises:
            ValidationException: If the name or email is not acceptable
        """
        errors = validate_payer_name(full_name).errors + validate_email(email).errors
        if errors:
            raise ValidationException(
                "Please enter a valid name and email.",
                validation_errors=ErrorMessageFormatter.format_validation_errors(
                    errors
                )["errors"],
            )
        return {"name": full_name.strip(), "email": email.strip()}

    def finalize(self, payment_status: Optional[str]) -> bool:
        """
        Record the provider's verdict on the payment.

        Returns:
            True when the payment succeeded and the cart was cleared
        """
        if payment_status == PAYMENT_SUCCEEDED:
            self.cart.clear()
            self.intent = None
            self.notifier.success("Payment successful")
            return True

        self.notifier.error("Payment failed")
        return False
