"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from shared.domain.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class OrderPlaced(DomainEvent):
    """Raised once the ledger has persisted a pending order."""

    user_id: int
    total_amount: Decimal


@dataclass(frozen=True, kw_only=True)
class OrderPaid(DomainEvent):
    """Raised when a guarded update moved an order to payment success."""

    user_id: int
    lines_reconciled: int
