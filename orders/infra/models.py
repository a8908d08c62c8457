from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

from django.db import models


PAYMENT_STATE = (
    ("paid", "Paid"),
    ("balance_due", "Balance due"),
    ("credit_owed", "Credit owed"),
    ("failed", "Failed"),
)

SHIPMENT_STATE = (
    ("backorder", "Backorder"),
    ("partial", "Partial"),
    ("ready", "Ready"),
    ("pending", "Pending"),
    ("shipped", "Shipped"),
)


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


def money_field(**kwargs):
    return models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"), **kwargs)


class OrderORM(TimeStampedModel):

    STATE_CHOICES = (
        ("cart", "Cart"),
        ("address", "Address"),
        ("delivery", "Delivery"),
        ("payment", "Payment"),
        ("confirm", "Confirm"),
        ("complete", "Complete"),
        ("canceled", "Canceled"),
    )

    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    number = models.CharField(max_length=32, blank=True, default="")
    state = models.CharField(max_length=32, choices=STATE_CHOICES, default="cart")
    completed_at = models.DateTimeField(null=True, blank=True)

    item_total = money_field()
    adjustment_total = money_field()
    payment_total = money_field()
    total = money_field()
    payment_state = models.CharField(max_length=32, choices=PAYMENT_STATE, null=True, blank=True)
    shipment_state = models.CharField(max_length=32, choices=SHIPMENT_STATE, null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=("number",)),
            models.Index(fields=("payment_state",)),
            models.Index(fields=("shipment_state",)),
        ]


class LineItemORM(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    order = models.ForeignKey(
        OrderORM,
        on_delete=models.CASCADE,
        related_name="line_items",
    )
    variant_id = models.UUIDField(null=True, blank=True)
    quantity = models.IntegerField(default=1)
    price = money_field()
    adjustment_total = money_field()

    class Meta:
        ordering = ("created_at",)
        indexes = [
            models.Index(fields=("order",)),
        ]


class PaymentORM(TimeStampedModel):

    STATE_CHOICES = (
        ("checkout", "Checkout"),
        ("pending", "Pending"),
        ("processing", "Processing"),
        ("completed", "Completed"),
        ("failed", "Failed"),
        ("void", "Void"),
    )

    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    order = models.ForeignKey(
        OrderORM,
        on_delete=models.CASCADE,
        related_name="payments",
    )
    amount = money_field()
    state = models.CharField(max_length=32, choices=STATE_CHOICES, default="checkout")
    # per order, starting at 1; breaks created_at ties
    position = models.PositiveIntegerField(default=0, editable=False)

    class Meta:
        ordering = ("created_at", "position")
        indexes = [
            models.Index(fields=("order", "created_at", "position")),
        ]

    def save(self, *args, **kwargs):
        if self._state.adding and not self.position:
            last_payment = (
                PaymentORM.objects
                .filter(order_id=self.order_id)
                .order_by("-position")
                .first()
            )
            self.position = (last_payment.position + 1) if last_payment else 1
        super().save(*args, **kwargs)


class ShipmentORM(TimeStampedModel):

    STATE_CHOICES = (
        ("pending", "Pending"),
        ("ready", "Ready"),
        ("shipped", "Shipped"),
    )

    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    order = models.ForeignKey(
        OrderORM,
        on_delete=models.CASCADE,
        related_name="shipments",
    )
    cost = money_field()
    state = models.CharField(max_length=32, choices=STATE_CHOICES, default="pending")

    class Meta:
        ordering = ("created_at",)
        indexes = [
            models.Index(fields=("order",)),
        ]


class InventoryUnitORM(TimeStampedModel):

    STATE_CHOICES = (
        ("on_hand", "On hand"),
        ("backordered", "Backordered"),
        ("shipped", "Shipped"),
    )

    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    order = models.ForeignKey(
        OrderORM,
        on_delete=models.CASCADE,
        related_name="inventory_units",
    )
    shipment = models.ForeignKey(
        ShipmentORM,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="inventory_units",
    )
    state = models.CharField(max_length=32, choices=STATE_CHOICES, default="on_hand")

    class Meta:
        indexes = [
            models.Index(fields=("order", "state")),
        ]


class AdjustmentORM(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    order = models.ForeignKey(
        OrderORM,
        on_delete=models.CASCADE,
        related_name="adjustments",
    )
    line_item = models.ForeignKey(
        LineItemORM,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="adjustments",
    )
    label = models.CharField(max_length=255, blank=True, default="")
    amount = money_field()
    eligible = models.BooleanField(default=True)

    class Meta:
        ordering = ("created_at",)
        indexes = [
            models.Index(fields=("order", "eligible")),
        ]
