"""
Unit tests for domain models.
"""
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from orders.domain.order import (
    InventoryUnit,
    InventoryUnitState,
    LineItem,
    Order,
    Payment,
    PaymentState,
    PaymentStatus,
    Shipment,
    ShipmentState,
    ShipmentStatus,
)


class LineItemTest(TestCase):
    """Tests for LineItem snapshot."""

    def test_amount_is_price_times_quantity(self):
        """Test line amount."""
        item = LineItem(price=Decimal("19.99"), quantity=3)
        self.assertEqual(item.amount, Decimal("59.97"))

    def test_adjustment_total_defaults_to_zero(self):
        item = LineItem(price=Decimal("10.00"))
        self.assertEqual(item.adjustment_total, Decimal("0.00"))


class PaymentTest(TestCase):

    def test_state_is_coerced_from_string(self):
        """Test that raw storage values become enum members."""
        payment = Payment(amount=Decimal("5.00"), state="completed")
        self.assertEqual(payment.state, PaymentStatus.COMPLETED)
        self.assertTrue(payment.completed)
        self.assertFalse(payment.failed)

    def test_unknown_state_fails(self):
        with self.assertRaises(ValueError):
            Payment(amount=Decimal("5.00"), state="refunded")


class ShipmentUpdateTest(TestCase):
    """Tests for shipment self-update against its order."""

    def setUp(self):
        self.written = []
        self.order = Order(completed_at=timezone.now())

    def _shipment(self, state=ShipmentStatus.PENDING, units=None):
        return Shipment(
            cost=Decimal("10.00"),
            state=state,
            inventory_units=units,
            state_writer=self.written.append,
        )

    def test_pending_shipment_becomes_ready_when_order_paid(self):
        """Test pending -> ready once payment is settled."""
        self.order.payment_state = PaymentState.PAID
        shipment = self._shipment()

        self.assertTrue(shipment.update(self.order))
        self.assertEqual(shipment.state, ShipmentStatus.READY)
        self.assertEqual(self.written, [shipment])

    def test_credit_owed_counts_as_paid(self):
        self.order.payment_state = PaymentState.CREDIT_OWED
        shipment = self._shipment()
        shipment.update(self.order)
        self.assertEqual(shipment.state, ShipmentStatus.READY)

    def test_ready_shipment_goes_back_to_pending_on_balance_due(self):
        """Test ready -> pending when the order owes money again."""
        self.order.payment_state = PaymentState.BALANCE_DUE
        shipment = self._shipment(state=ShipmentStatus.READY)

        shipment.update(self.order)
        self.assertEqual(shipment.state, ShipmentStatus.PENDING)

    def test_shipped_shipment_stays_shipped(self):
        self.order.payment_state = PaymentState.BALANCE_DUE
        shipment = self._shipment(state=ShipmentStatus.SHIPPED)

        self.assertFalse(shipment.update(self.order))
        self.assertEqual(shipment.state, ShipmentStatus.SHIPPED)
        self.assertEqual(self.written, [])

    def test_backordered_shipment_stays_pending(self):
        """Test that backordered units hold the shipment back."""
        self.order.payment_state = PaymentState.PAID
        shipment = self._shipment(
            units=[InventoryUnit(state=InventoryUnitState.BACKORDERED)],
        )

        self.assertFalse(shipment.update(self.order))
        self.assertEqual(shipment.state, ShipmentStatus.PENDING)

    def test_update_without_writer(self):
        self.order.payment_state = PaymentState.PAID
        shipment = Shipment(cost=Decimal("1.00"))
        self.assertTrue(shipment.update(self.order))


class OrderTest(TestCase):
    """Tests for Order aggregate."""

    def test_new_order_is_not_completed(self):
        order = Order()
        self.assertFalse(order.completed)
        self.assertIsNone(order.payment_state)
        self.assertIsNone(order.shipment_state)
        self.assertEqual(order.total, Decimal("0.00"))

    def test_completed_follows_completed_at(self):
        order = Order(completed_at=timezone.now())
        self.assertTrue(order.completed)

    def test_states_are_coerced_from_strings(self):
        order = Order(payment_state="paid", shipment_state="partial")
        self.assertEqual(order.payment_state, PaymentState.PAID)
        self.assertEqual(order.shipment_state, ShipmentState.PARTIAL)
        self.assertTrue(order.paid)

    def test_backordered_includes_unassigned_units(self):
        """Test that backordered stock counts even without a shipment."""
        order = Order(inventory_units=[InventoryUnit(state=InventoryUnitState.BACKORDERED)])
        self.assertTrue(order.backordered)

    def test_last_payment_is_most_recently_added(self):
        first = Payment(amount=Decimal("1.00"), state=PaymentStatus.COMPLETED)
        second = Payment(amount=Decimal("2.00"), state=PaymentStatus.FAILED)
        order = Order(payments=[first, second])
        self.assertIs(order.last_payment, second)
        self.assertIsNone(Order().last_payment)

    def test_collections_are_copies(self):
        order = Order(line_items=[LineItem(price=Decimal("1.00"))])
        order.line_items.append(LineItem(price=Decimal("2.00")))
        self.assertEqual(len(order.line_items), 1)


class OrderHookRegistryTest(TestCase):
    """Tests for update hook registration."""

    def test_class_hooks_come_before_instance_hooks(self):
        def registered(order):
            pass

        def passed_in(order):
            pass

        Order.register_update_hook(registered)
        order = Order(hooks=[passed_in])
        self.assertEqual(order.hooks, [registered, passed_in])

    def test_register_twice_keeps_one_entry(self):
        def hook(order):
            pass

        Order.register_update_hook(hook)
        Order.register_update_hook(hook)
        self.assertEqual(Order().hooks, [hook])

    def test_unregister(self):
        def hook(order):
            pass

        Order.register_update_hook(hook)
        Order.unregister_update_hook(hook)
        Order.unregister_update_hook(hook)
        self.assertEqual(Order().hooks, [])

    def test_subclass_hooks_stay_on_subclass(self):
        """Test that a subclass registry does not leak into the base class."""
        def base_hook(order):
            pass

        def sub_hook(order):
            pass

        class GiftOrder(Order):
            pass

        Order.register_update_hook(base_hook)
        GiftOrder.register_update_hook(sub_hook)

        self.assertEqual(Order().hooks, [base_hook])
        self.assertEqual(GiftOrder().hooks, [base_hook, sub_hook])

        GiftOrder.clear_update_hooks()
        self.assertEqual(Order().hooks, [base_hook])


class OrderStateChangedTest(TestCase):
    """Tests for the state change notification sink."""

    def test_change_records_event(self):
        order = Order(payment_state="balance_due")
        order.payment_state = PaymentState.PAID
        order.state_changed("payment")

        events = order.pull_events()
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0].name, "payment")
        self.assertEqual(events[0].previous_state, "balance_due")
        self.assertEqual(events[0].next_state, "paid")
        self.assertEqual(events[0].aggregate_id, order.id)
        self.assertEqual(order.pull_events(), [])

    def test_unchanged_state_records_nothing(self):
        order = Order(shipment_state="ready")
        order.state_changed("shipment")
        self.assertEqual(order.pull_events(), [])

    def test_change_back_before_persisting_drops_event(self):
        """Test that only the latest value per state name is pending."""
        order = Order(payment_state="paid")
        order.payment_state = PaymentState.FAILED
        order.state_changed("payment")
        order.payment_state = PaymentState.PAID
        order.state_changed("payment")
        self.assertEqual(order.pull_events(), [])

    def test_unset_state_is_none(self):
        order = Order(shipment_state="pending")
        order.shipment_state = None
        order.state_changed("shipment")
        [event] = order.pull_events()
        self.assertEqual(event.previous_state, "pending")
        self.assertIsNone(event.next_state)

    def test_mark_persisted_moves_baseline(self):
        order = Order()
        order.payment_state = PaymentState.PAID
        order.mark_persisted()
        order.state_changed("payment")
        self.assertEqual(order.pull_events(), [])

    def test_unknown_name_fails(self):
        with self.assertRaises(ValueError):
            Order().state_changed("refund")
