"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers /
views) and the Service layer.  DTOs are immutable (``frozen=True``).

- ``CartItemDTO``: one cart line as sent by the client (only ``id`` and
  ``quantity`` are trusted; ``price`` / ``name`` are dropped).
- ``CheckoutDTO``: the checkout request (cart + shipping address).
- ``OrderLineDTO``: an order line with server-resolved name and price.
- ``OrderUpdateDTO``: typed partial update of the two status fields.
- ``CheckoutResultDTO``: what a successful checkout hands back.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.orders.constants import OrderStatus, PaymentStatus

# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CartItemDTO(BaseModel):
    """Immutable DTO for a single cart line.

    Unknown keys (notably a client-side ``price`` or ``name``) are
    ignored; prices are always resolved from the catalog.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class CheckoutDTO(BaseModel):
    """Immutable DTO for checkout requests.

    An empty ``items`` list is accepted here; the checkout service turns
    it into ``InvalidOrder`` so every entry point reports it the same way.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    items: List[CartItemDTO] = Field(default_factory=list)
    address: str = ""

    @field_validator("address")
    @classmethod
    def strip_address(cls, v: str) -> str:
        return v.strip()

    @model_validator(mode="after")
    def no_duplicate_products(self):
        """Prevent the same product id appearing on two cart lines."""
        product_ids = [item.id for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("Duplicate products in cart. Merge the quantities.")
        return self

    @property
    def product_ids(self) -> List[int]:
        return [item.id for item in self.items]


class OrderLineDTO(BaseModel):
    """Immutable, server-priced order line handed to the ledger."""

    model_config = ConfigDict(frozen=True)

    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class OrderUpdateDTO(BaseModel):
    """Typed partial update: only the fields supplied are written."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None

    @property
    def is_empty(self) -> bool:
        return self.status is None and self.payment_status is None

    @property
    def marks_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAYMENT_SUCCESS

    def as_fields(self) -> dict:
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class CheckoutResultDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: int
    session_id: str
    url: str
