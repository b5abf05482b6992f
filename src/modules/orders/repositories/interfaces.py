"""Order repository interface.

The ledger operations: atomic creation with lines, session linkage and
the guarded status update.  There is no generic ``save``: after creation
the guarded update is the only way an order changes state.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, List, Sequence

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.orders.dtos import OrderLineDTO, OrderUpdateDTO
    from modules.orders.models import Order, OrderItem


class IOrderRepository(ABC):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes its OrderItem lines; creation must be
    atomic.
    """

    @abstractmethod
    def create(
        self,
        user_id: int,
        lines: Sequence[OrderLineDTO],
        shipping_address: str,
        total_amount: Decimal,
    ) -> Order:
        """Insert the order (pending/unpaid) and one row per line atomically."""

    @abstractmethod
    def attach_payment_session(
        self, order_id: int, user_id: int, session_id: str
    ) -> int:
        """Store the provider session id on the caller's order; affected rows."""

    @abstractmethod
    def update_unless_paid(
        self, order_id: int, user_id: int, changes: OrderUpdateDTO
    ) -> int:
        """Apply ``changes`` to the caller's order unless it is already paid.

        Returns the number of affected rows (0 or 1).
        """

    @abstractmethod
    def get_lines(self, order_id: int) -> List[OrderItem]:
        """The order's lines in insertion order."""

    @abstractmethod
    def list_for_user(self, user_id: int) -> QuerySet:
        """The user's orders, newest first, lines prefetched."""
