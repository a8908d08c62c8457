"""
Domain events emitted while an order is recalculated.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class EventVersion(str, Enum):
    """Event version for upcasting."""
    V1 = "1.0"


@dataclass
class DomainEvent:
    """Base domain event."""
    event_id: UUID
    aggregate_id: UUID
    event_type: str
    # version and occurred_at are set in subclasses to avoid dataclass field ordering issues


@dataclass
class OrderStateChanged(DomainEvent):
    """Payment or shipment state of an order moved to a new value."""
    name: str
    previous_state: str | None
    next_state: str | None
    version: EventVersion = EventVersion.V1
    occurred_at: str = ""
