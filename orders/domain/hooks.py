"""
Post-update hooks registered on an order.
"""
from __future__ import annotations

import logging

from orders.domain.order import Order


logger = logging.getLogger(__name__)


def hook_name(hook) -> str:
    return getattr(hook, "__qualname__", None) or repr(hook)


class HookDispatcher:
    """
    Runs every hook of an order in registration order.

    A hook signals failure by raising. Whatever a hook returns, ``False``
    included, is ignored. The first exception is logged and re-raised, and
    the hooks after it do not run.
    """

    def run(self, order: Order) -> None:
        for hook in order.hooks:
            try:
                hook(order)
            except Exception as e:
                logger.error(
                    "order_update_hook_failed",
                    extra={
                        "order_id": str(order.id),
                        "hook": hook_name(hook),
                        "error": str(e),
                    },
                    exc_info=True,
                )
                raise
