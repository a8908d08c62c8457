"""
Domain model for the Order aggregate and the child records it aggregates.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Callable
from uuid import UUID, uuid4

from orders.domain.events import OrderStateChanged


ZERO = Decimal("0.00")


class PaymentState(str, Enum):
    """Derived payment state of an order. ``None`` on the order means unset."""
    PAID = "paid"
    BALANCE_DUE = "balance_due"
    CREDIT_OWED = "credit_owed"
    FAILED = "failed"


class ShipmentState(str, Enum):
    """Derived fulfillment state of an order. ``None`` on the order means unset."""
    BACKORDER = "backorder"
    PARTIAL = "partial"
    READY = "ready"
    PENDING = "pending"
    SHIPPED = "shipped"


class PaymentStatus(str, Enum):
    """Payment lifecycle state."""
    CHECKOUT = "checkout"
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    VOID = "void"


class ShipmentStatus(str, Enum):
    """Shipment lifecycle state."""
    PENDING = "pending"
    READY = "ready"
    SHIPPED = "shipped"


class InventoryUnitState(str, Enum):
    """Inventory unit stock state."""
    ON_HAND = "on_hand"
    BACKORDERED = "backordered"
    SHIPPED = "shipped"


class Payment:
    """Payment snapshot."""

    def __init__(
        self,
        amount: Decimal,
        state: PaymentStatus = PaymentStatus.CHECKOUT,
        id: UUID | None = None,
    ):
        self.id = id or uuid4()
        self.amount = amount
        self.state = PaymentStatus(state)

    @property
    def completed(self) -> bool:
        return self.state == PaymentStatus.COMPLETED

    @property
    def failed(self) -> bool:
        return self.state == PaymentStatus.FAILED


class LineItem:
    """Order line item snapshot."""

    def __init__(
        self,
        price: Decimal,
        quantity: int = 1,
        adjustment_total: Decimal = ZERO,
        id: UUID | None = None,
    ):
        self.id = id or uuid4()
        self.price = price
        self.quantity = quantity
        self.adjustment_total = adjustment_total

    @property
    def amount(self) -> Decimal:
        """Line amount before adjustments."""
        return self.price * self.quantity


class Adjustment:
    """Discount or charge attached to an order."""

    def __init__(
        self,
        amount: Decimal,
        eligible: bool = True,
        label: str = "",
        line_item_id: UUID | None = None,
        id: UUID | None = None,
    ):
        self.id = id or uuid4()
        self.amount = amount
        self.eligible = eligible
        self.label = label
        self.line_item_id = line_item_id


class InventoryUnit:
    """Single unit of stock reserved for an order."""

    def __init__(
        self,
        state: InventoryUnitState = InventoryUnitState.ON_HAND,
        shipment_id: UUID | None = None,
        id: UUID | None = None,
    ):
        self.id = id or uuid4()
        self.state = InventoryUnitState(state)
        self.shipment_id = shipment_id

    @property
    def backordered(self) -> bool:
        return self.state == InventoryUnitState.BACKORDERED


class Shipment:
    """Shipment snapshot able to move itself forward against its order."""

    def __init__(
        self,
        cost: Decimal = ZERO,
        state: ShipmentStatus = ShipmentStatus.PENDING,
        inventory_units: list[InventoryUnit] | None = None,
        id: UUID | None = None,
        state_writer: Callable[[Shipment], None] | None = None,
    ):
        self.id = id or uuid4()
        self.cost = cost
        self.state = ShipmentStatus(state)
        self._inventory_units = inventory_units or []
        self._state_writer = state_writer

    @property
    def inventory_units(self) -> list[InventoryUnit]:
        return list(self._inventory_units)

    @property
    def backordered(self) -> bool:
        return any(unit.backordered for unit in self._inventory_units)

    def determine_state(self, order: Order) -> ShipmentStatus:
        """Work out the state this shipment should be in for ``order``."""
        if self.state == ShipmentStatus.SHIPPED:
            return ShipmentStatus.SHIPPED
        if self.backordered:
            return ShipmentStatus.PENDING
        if order.paid:
            return ShipmentStatus.READY
        return ShipmentStatus.PENDING

    def update(self, order: Order) -> bool:
        """
        Move the shipment to the state implied by ``order``.

        The new state is handed to the state writer, which must write it
        without going through the save pipeline. Returns True on change.
        """
        new_state = self.determine_state(order)
        if new_state == self.state:
            return False

        self.state = new_state
        if self._state_writer is not None:
            self._state_writer(self)
        return True


Hook = Callable[["Order"], object]


class Order:
    """Order aggregate root."""

    _update_hooks: list[Hook] = []

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls._update_hooks = []

    def __init__(
        self,
        id: UUID | None = None,
        number: str = "",
        completed_at: datetime | None = None,
        line_items: list[LineItem] | None = None,
        payments: list[Payment] | None = None,
        shipments: list[Shipment] | None = None,
        adjustments: list[Adjustment] | None = None,
        inventory_units: list[InventoryUnit] | None = None,
        payment_state: PaymentState | None = None,
        shipment_state: ShipmentState | None = None,
        item_total: Decimal = ZERO,
        adjustment_total: Decimal = ZERO,
        payment_total: Decimal = ZERO,
        total: Decimal = ZERO,
        hooks: list[Hook] | None = None,
    ):
        self.id = id or uuid4()
        self.number = number
        self.completed_at = completed_at
        self._line_items = line_items or []
        self._payments = payments or []
        self._shipments = shipments or []
        self._adjustments = adjustments or []
        self._inventory_units = inventory_units or []

        self.payment_state = PaymentState(payment_state) if payment_state else None
        self.shipment_state = ShipmentState(shipment_state) if shipment_state else None
        self.item_total = item_total
        self.shipment_total = ZERO
        self.adjustment_total = adjustment_total
        self.payment_total = payment_total
        self.total = total

        self.hooks = type(self).registered_update_hooks() + list(hooks or [])
        self._events: list[OrderStateChanged] = []
        self._persisted_states: dict[str, Enum | None] = {}
        self.mark_persisted()

    @classmethod
    def register_update_hook(cls, hook: Hook) -> None:
        """Register a hook run on orders of ``cls`` and its subclasses after totals update."""
        if hook not in cls._update_hooks:
            cls._update_hooks.append(hook)

    @classmethod
    def unregister_update_hook(cls, hook: Hook) -> None:
        if hook in cls._update_hooks:
            cls._update_hooks.remove(hook)

    @classmethod
    def clear_update_hooks(cls) -> None:
        cls._update_hooks.clear()

    @classmethod
    def registered_update_hooks(cls) -> list[Hook]:
        """Hooks of base classes first, then those registered on ``cls``."""
        hooks: list[Hook] = []
        for klass in reversed(cls.__mro__):
            for hook in klass.__dict__.get("_update_hooks", ()):
                if hook not in hooks:
                    hooks.append(hook)
        return hooks

    @property
    def line_items(self) -> list[LineItem]:
        return list(self._line_items)

    @property
    def payments(self) -> list[Payment]:
        """Payments, oldest first."""
        return list(self._payments)

    @property
    def shipments(self) -> list[Shipment]:
        return list(self._shipments)

    @property
    def adjustments(self) -> list[Adjustment]:
        return list(self._adjustments)

    @property
    def inventory_units(self) -> list[InventoryUnit]:
        return list(self._inventory_units)

    @property
    def last_payment(self) -> Payment | None:
        return self._payments[-1] if self._payments else None

    @property
    def completed(self) -> bool:
        """Checkout finished; payment and shipment states are tracked."""
        return self.completed_at is not None

    @property
    def backordered(self) -> bool:
        return any(unit.backordered for unit in self._inventory_units)

    @property
    def paid(self) -> bool:
        return self.payment_state in (PaymentState.PAID, PaymentState.CREDIT_OWED)

    def state_changed(self, name: str) -> None:
        """
        Notify observers that the ``<name>_state`` attribute was recalculated.

        A pending ``OrderStateChanged`` event is kept only when the value
        differs from the persisted one, one per state name.
        """
        if name not in self._persisted_states:
            raise ValueError(f"Unknown order state: {name}")

        previous = self._persisted_states[name]
        current = getattr(self, f"{name}_state")
        self._events = [event for event in self._events if event.name != name]
        if previous == current:
            return

        self._events.append(OrderStateChanged(
            event_id=uuid4(),
            aggregate_id=self.id,
            event_type="OrderStateChanged",
            name=name,
            previous_state=previous.value if previous else None,
            next_state=current.value if current else None,
        ))

    def pull_events(self) -> list[OrderStateChanged]:
        """Return pending events and forget them."""
        events, self._events = self._events, []
        return events

    def mark_persisted(self) -> None:
        """Treat the current payment/shipment states as the stored ones."""
        self._persisted_states = {
            "payment": self.payment_state,
            "shipment": self.shipment_state,
        }
