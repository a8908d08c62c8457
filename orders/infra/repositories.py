"""
Infrastructure repositories for the Order aggregate.

Two storage paths exist on purpose. Collaborators save child rows with
``Model.save()``, which runs the save signals that trigger recalculation.
Everything written by the recalculation itself goes through
``QuerySet.update()``, which sends no signals.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from django.db.models import Prefetch

from orders.domain.errors import OrderNotFound
from orders.domain.order import (
    ZERO,
    Adjustment,
    InventoryUnit,
    LineItem,
    Order,
    Payment,
    Shipment,
)
from orders.infra.models import (
    InventoryUnitORM,
    OrderORM,
    ShipmentORM,
)


logger = logging.getLogger(__name__)


def _money(value: Decimal | None) -> Decimal:
    return ZERO if value is None else value


class ShipmentRepository:
    """Repository for shipment rows."""

    def update_state(self, shipment: Shipment) -> None:
        """Write the shipment state without running save signals."""
        ShipmentORM.objects.filter(id=shipment.id).update(state=shipment.state.value)
        logger.info(
            "shipment_state_updated",
            extra={"shipment_id": str(shipment.id), "status": shipment.state.value},
        )


class OrderRepository:
    """Repository for the Order aggregate."""

    def __init__(self, shipment_repo: ShipmentRepository | None = None):
        self.shipment_repo = shipment_repo or ShipmentRepository()

    def get_by_id(self, order_id: UUID) -> Order | None:
        """Get order with all child collections (no N+1)."""
        try:
            order_orm = (
                OrderORM.objects
                .prefetch_related(
                    "line_items",
                    "payments",
                    "adjustments",
                    "inventory_units",
                    Prefetch(
                        "shipments",
                        queryset=ShipmentORM.objects.prefetch_related("inventory_units"),
                    ),
                )
                .get(id=order_id)
            )
        except OrderORM.DoesNotExist:
            return None
        return self._to_domain(order_orm)

    def _to_domain(self, order_orm: OrderORM) -> Order:
        """Convert ORM model to domain entity."""
        line_items = [
            LineItem(
                id=item_orm.id,
                price=_money(item_orm.price),
                quantity=item_orm.quantity,
                adjustment_total=_money(item_orm.adjustment_total),
            )
            for item_orm in order_orm.line_items.all()
        ]
        payments = [
            Payment(id=payment_orm.id, amount=_money(payment_orm.amount), state=payment_orm.state)
            for payment_orm in order_orm.payments.all()
        ]
        shipments = [
            Shipment(
                id=shipment_orm.id,
                cost=_money(shipment_orm.cost),
                state=shipment_orm.state,
                inventory_units=[self._unit_to_domain(u) for u in shipment_orm.inventory_units.all()],
                state_writer=self.shipment_repo.update_state,
            )
            for shipment_orm in order_orm.shipments.all()
        ]
        adjustments = [
            Adjustment(
                id=adj_orm.id,
                amount=_money(adj_orm.amount),
                eligible=adj_orm.eligible,
                label=adj_orm.label,
                line_item_id=adj_orm.line_item_id,
            )
            for adj_orm in order_orm.adjustments.all()
        ]

        return Order(
            id=order_orm.id,
            number=order_orm.number,
            completed_at=order_orm.completed_at,
            line_items=line_items,
            payments=payments,
            shipments=shipments,
            adjustments=adjustments,
            inventory_units=[self._unit_to_domain(u) for u in order_orm.inventory_units.all()],
            payment_state=order_orm.payment_state,
            shipment_state=order_orm.shipment_state,
            item_total=_money(order_orm.item_total),
            adjustment_total=_money(order_orm.adjustment_total),
            payment_total=_money(order_orm.payment_total),
            total=_money(order_orm.total),
        )

    def _unit_to_domain(self, unit_orm: InventoryUnitORM) -> InventoryUnit:
        return InventoryUnit(id=unit_orm.id, state=unit_orm.state, shipment_id=unit_orm.shipment_id)


class OrderTotalsWriter:
    """Writes derived order fields straight to the orders table."""

    def persist_totals(self, order: Order) -> None:
        """Persist derived state and totals without save signals."""
        self._update(
            order,
            payment_state=order.payment_state.value if order.payment_state else None,
            shipment_state=order.shipment_state.value if order.shipment_state else None,
            item_total=order.item_total,
            adjustment_total=order.adjustment_total,
            payment_total=order.payment_total,
            total=order.total,
        )
        order.mark_persisted()

    def persist_adjustment_total(self, order: Order) -> None:
        self._update(order, adjustment_total=order.adjustment_total)

    def _update(self, order: Order, **fields) -> None:
        updated = OrderORM.objects.filter(id=order.id).update(**fields)
        if not updated:
            raise OrderNotFound(order.id)
