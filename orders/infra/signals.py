"""
Save-pipeline receivers: any change to an order's children recalculates it.
"""
from __future__ import annotations

import logging

from django.db.models.signals import post_delete, post_save

from orders.domain.errors import OrderNotFound
from orders.infra.models import AdjustmentORM, LineItemORM, PaymentORM, ShipmentORM
from orders.services import OrderUpdater


logger = logging.getLogger(__name__)

CHILD_MODELS = (PaymentORM, LineItemORM, ShipmentORM, AdjustmentORM)


def recalculate_on_save(sender, instance, raw=False, **kwargs):
    if raw:
        return
    OrderUpdater().update_order(instance.order_id)


def recalculate_on_delete(sender, instance, **kwargs):
    try:
        OrderUpdater().update_order(instance.order_id)
    except OrderNotFound:
        # order is being deleted together with its children
        logger.info(
            "order_update_skipped",
            extra={"order_id": str(instance.order_id), "operation": "delete"},
        )


def connect_signals() -> None:
    for model in CHILD_MODELS:
        post_save.connect(
            recalculate_on_save,
            sender=model,
            dispatch_uid=f"orders.recalculate_on_save.{model.__name__}",
        )
        post_delete.connect(
            recalculate_on_delete,
            sender=model,
            dispatch_uid=f"orders.recalculate_on_delete.{model.__name__}",
        )
