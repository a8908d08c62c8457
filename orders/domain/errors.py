"""
Domain errors raised while recalculating order state.
"""
from __future__ import annotations

from uuid import UUID


class OrderUpdateError(Exception):
    """Base error for order recalculation."""


class OrderNotFound(OrderUpdateError, LookupError):
    """Order row is missing from storage."""

    def __init__(self, order_id: UUID):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")
