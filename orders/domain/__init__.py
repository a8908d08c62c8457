from orders.domain.order import (
    Adjustment,
    InventoryUnit,
    LineItem,
    Order,
    Payment,
    Shipment,
)

__all__ = ["Adjustment", "InventoryUnit", "LineItem", "Order", "Payment", "Shipment"]
