"""Payment gateway interface.

The checkout and webhook services depend on this contract only; the
Stripe SDK is confined to ``stripe_gateway.py``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PaymentLineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    unit_price: Decimal
    quantity: int


class PaymentSession(BaseModel):
    """A hosted checkout session opened at the provider."""

    model_config = ConfigDict(frozen=True)

    id: str
    url: str


class PaymentEvent(BaseModel):
    """A verified provider notification, reduced to what the handler reads."""

    model_config = ConfigDict(frozen=True)

    type: str
    session_id: Optional[str] = None
    metadata: Dict[str, str] = Field(default_factory=dict)


class IPaymentGateway(ABC):
    """Contract for the hosted-payment provider."""

    @abstractmethod
    def create_checkout_session(
        self,
        line_items: List[PaymentLineItem],
        metadata: Dict[str, str],
        success_url: str,
        cancel_url: str,
        customer_email: Optional[str] = None,
    ) -> PaymentSession:
        """Open a hosted checkout session.

        Raises:
            PaymentSessionFailed: the provider rejected the request.
        """

    @abstractmethod
    def construct_event(self, payload: bytes, signature: str) -> PaymentEvent:
        """Verify ``signature`` over the raw ``payload`` and parse the event.

        Raises:
            InvalidSignature: the payload is not authentic or not parseable.
        """
