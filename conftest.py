"""
Pytest configuration for Django tests.
"""
import os

import pytest

# Set the Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'order_state.settings')


@pytest.fixture(autouse=True)
def _reset_update_hooks():
    """Hooks registered on the Order class must not leak between tests."""
    from orders.domain.order import Order

    Order.clear_update_hooks()
    yield
    Order.clear_update_hooks()
