"""
Payment and shipment state classification for completed orders.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from orders.domain.order import Order, PaymentState, ShipmentState


CENT = Decimal("0.01")


def round_money(amount: Decimal, rounding: str = ROUND_HALF_UP) -> Decimal:
    """Round ``amount`` to the cent."""
    return Decimal(amount).quantize(CENT, rounding=rounding)


class PaymentStateClassifier:
    """
    Updates ``payment_state``:

    paid          payment_total equals total
    balance_due   payment_total is less than total, or the order has no line items
    credit_owed   payment_total is greater than total
    failed        balance is due and the most recent payment failed
    """

    def __init__(self, rounding: str = ROUND_HALF_UP):
        self.rounding = rounding

    def classify(self, order: Order) -> PaymentState:
        payment_total = round_money(order.payment_total, self.rounding)
        total = round_money(order.total, self.rounding)

        # an emptied cart still owes whatever is left
        if not order.line_items or payment_total < total:
            last_payment = order.last_payment
            if last_payment is not None and last_payment.failed:
                order.payment_state = PaymentState.FAILED
            else:
                order.payment_state = PaymentState.BALANCE_DUE
        elif payment_total > total:
            order.payment_state = PaymentState.CREDIT_OWED
        else:
            order.payment_state = PaymentState.PAID

        order.state_changed("payment")
        return order.payment_state


class ShipmentStateClassifier:
    """
    Updates ``shipment_state``:

    backorder  some inventory of the order is backordered
    partial    shipments disagree on their state
    <state>    every shipment is in the same state (pending, ready, shipped)
    None       the order has no shipments
    """

    def classify(self, order: Order) -> ShipmentState | None:
        if order.backordered:
            order.shipment_state = ShipmentState.BACKORDER
        else:
            states = {shipment.state for shipment in order.shipments}
            if len(states) > 1:
                order.shipment_state = ShipmentState.PARTIAL
            elif states:
                order.shipment_state = ShipmentState(states.pop().value)
            else:
                order.shipment_state = None
            # TODO: inventory units sold but not yet assigned to a shipment
            # should also mean partial; they are not inspected here.

        order.state_changed("shipment")
        return order.shipment_state
