"""Order domain exceptions.

Raised by the Service Layer when a checkout or payment confirmation
cannot proceed.  The API layer (Views) catches these and translates
them into a single user-facing message plus HTTP status.
"""

from __future__ import annotations

from typing import Sequence


class OutOfStock(Exception):
    """One or more cart lines exceed available stock.

    ``shortages`` names every deficient line (product name, or
    ``ID:<id>`` when the product does not exist).
    """

    def __init__(self, shortages: Sequence[str]) -> None:
        self.shortages = list(shortages)
        super().__init__(f"Items out of stock: {', '.join(self.shortages)}")


class ProductsNotFound(Exception):
    """The batch price lookup returned no products at all."""

    def __init__(self) -> None:
        super().__init__("Products not found.")


class ProductNotFound(Exception):
    """A cart line references a product absent from the price lookup."""

    def __init__(self, product_id: int) -> None:
        self.product_id = product_id
        super().__init__(f"Product ID {product_id} not found.")


class InvalidOrder(Exception):
    """Order input is unusable (empty cart, blank address, non-positive total)."""


class OrderCreationFailed(Exception):
    """The ledger could not persist the order."""


class PaymentSessionFailed(Exception):
    """The payment provider refused or failed to open a checkout session."""


class InvalidSignature(Exception):
    """A webhook payload failed provider signature verification."""


class MissingOrderMetadata(Exception):
    """A completed-session event carries no usable order / user id."""
