"""In-memory event bus implementation."""

from __future__ import annotations

from typing import Dict, List, Type

import structlog
from django.db import transaction

from shared.domain.bus import IEventBus, IEventHandler
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class InMemoryEventBus(IEventBus):
    """Simple in-process event bus.

    ``publish`` dispatches synchronously; ``publish_on_commit`` defers the
    dispatch until the surrounding transaction commits, so handlers never
    observe a rolled-back order.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[DomainEvent], List[IEventHandler]] = {}

    def subscribe(self, event_class: Type[DomainEvent], handler: IEventHandler) -> None:
        handlers = self._handlers.setdefault(event_class, [])
        if handler not in handlers:
            handlers.append(handler)

    def publish(self, event: DomainEvent) -> None:
        handlers = self._handlers.get(type(event), [])
        logger.debug(
            "event_bus.publish", event_name=event.event_name, handlers=len(handlers)
        )
        for handler in handlers:
            handler.handle(event)

    def publish_on_commit(self, event: DomainEvent) -> None:
        transaction.on_commit(lambda: self.publish(event))


# Global bus instance (singleton)

event_bus = InMemoryEventBus()
