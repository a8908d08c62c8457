"""
Order totals aggregation.
"""
from __future__ import annotations

from decimal import Decimal

from orders.domain.order import ZERO, Order


class TotalsAggregator:
    """
    Sums child collections into the order's monetary fields.

    payment_total     completed payments only
    item_total        line item amounts
    shipment_total    shipment costs
    adjustment_total  line item adjustment totals
    total             item_total + shipment_total + adjustment_total
    """

    def update_totals(self, order: Order) -> None:
        order.payment_total = _sum(p.amount for p in order.payments if p.completed)
        order.item_total = _sum(item.amount for item in order.line_items)
        order.shipment_total = _sum(shipment.cost for shipment in order.shipments)
        order.adjustment_total = _sum(item.adjustment_total for item in order.line_items)
        order.total = order.item_total + order.shipment_total + order.adjustment_total

    def eligible_adjustment_total(self, order: Order) -> Decimal:
        """Sum of adjustments that currently count toward the order."""
        return _sum(adj.amount for adj in order.adjustments if adj.eligible)


def _sum(values) -> Decimal:
    return sum(values, ZERO)
