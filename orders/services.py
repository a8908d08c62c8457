"""
Application service that recalculates an order's derived state.
"""
from __future__ import annotations

import decimal
import logging
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils import timezone

from orders.domain.classifiers import PaymentStateClassifier, ShipmentStateClassifier
from orders.domain.errors import OrderNotFound
from orders.domain.hooks import HookDispatcher
from orders.domain.order import Order
from orders.domain.totals import TotalsAggregator
from orders.infra.event_store import EventStoreRepository
from orders.infra.repositories import OrderRepository, OrderTotalsWriter


logger = logging.getLogger(__name__)

ROUNDING_MODES = {
    decimal.ROUND_CEILING,
    decimal.ROUND_DOWN,
    decimal.ROUND_FLOOR,
    decimal.ROUND_HALF_DOWN,
    decimal.ROUND_HALF_EVEN,
    decimal.ROUND_HALF_UP,
    decimal.ROUND_UP,
    decimal.ROUND_05UP,
}


def money_rounding() -> str:
    """Rounding rule used when comparing money amounts."""
    rounding = getattr(settings, "ORDERS_MONEY_ROUNDING", decimal.ROUND_HALF_UP)
    if rounding not in ROUNDING_MODES:
        raise ImproperlyConfigured(
            f"ORDERS_MONEY_ROUNDING must be one of {sorted(ROUNDING_MODES)}, got {rounding!r}"
        )
    return rounding


class OrderUpdater:
    """
    Recalculates totals, payment state and shipment state of an order.

    Meant to be called by whatever changed a payment, line item, shipment or
    adjustment of the order. Nothing here may save the order or its children
    through ``Model.save()``: save signals call back into this service, so
    every write goes through ``QuerySet.update()`` instead.
    """

    def __init__(
        self,
        order_repo: OrderRepository | None = None,
        totals_writer: OrderTotalsWriter | None = None,
        event_store_repo: EventStoreRepository | None = None,
        hook_dispatcher: HookDispatcher | None = None,
        totals: TotalsAggregator | None = None,
        rounding: str | None = None,
    ):
        self.order_repo = order_repo or OrderRepository()
        self.totals_writer = totals_writer or OrderTotalsWriter()
        self.event_store_repo = event_store_repo or EventStoreRepository()
        self.hook_dispatcher = hook_dispatcher or HookDispatcher()
        self.totals = totals or TotalsAggregator()
        self.payment_classifier = PaymentStateClassifier(rounding or money_rounding())
        self.shipment_classifier = ShipmentStateClassifier()

    def update(self, order: Order) -> Order:
        """Recalculate and persist the derived state of ``order``."""
        # Totals go first on purpose, ahead of the completed-order steps.
        # Classifying against the stored totals would make a second update
        # change the states the first one wrote.
        self.totals.update_totals(order)

        if order.completed:
            self.payment_classifier.classify(order)

            # shipments settle first, classification reads their new states
            for shipment in order.shipments:
                shipment.update(order)
            self.shipment_classifier.classify(order)

        self.hook_dispatcher.run(order)
        self.totals_writer.persist_totals(order)
        self._publish_events(order)

        logger.info(
            "order_updated",
            extra={
                "order_id": str(order.id),
                "payment_state": order.payment_state.value if order.payment_state else None,
                "shipment_state": order.shipment_state.value if order.shipment_state else None,
                "total": str(order.total),
            },
        )
        return order

    def update_order(self, order_id: UUID) -> Order:
        """Load order by ID and recalculate it."""
        order = self.order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return self.update(order)

    def update_adjustments(self, order: Order) -> Order:
        """Set ``adjustment_total`` from eligible adjustments and write it."""
        order.adjustment_total = self.totals.eligible_adjustment_total(order)
        self.totals_writer.persist_adjustment_total(order)
        return order

    def _publish_events(self, order: Order) -> None:
        for event in order.pull_events():
            event.occurred_at = timezone.now().isoformat()
            self.event_store_repo.save_event(event, "Order")


def recalculate(order: Order) -> Order:
    """Recalculate ``order`` with the default collaborators."""
    return OrderUpdater().update(order)
