"""Order status transitions and cancellation.

``transition`` moves an order between statuses; ``cancel`` restores the
reserved stock and retires the order.  A transition whose target is
``cancelled`` is a cancellation, so stock is always restored when an
order leaves circulation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import structlog

from modules.core.locking import UnitOfWork
from modules.orders.constants import OrderStatus, can_cancel
from modules.orders.exceptions import (
    CannotCancelDelivered,
    InvalidStatusTransition,
    OrderNotFound,
)
from modules.products.stock import StockAdjuster

if TYPE_CHECKING:
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class OrderStatusMachine:
    def __init__(
        self,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
        unit_of_work: Optional[UnitOfWork] = None,
    ) -> None:
        self._order_repo = order_repository
        self._product_repo = product_repository
        self._uow = unit_of_work or UnitOfWork()
        self._stock = StockAdjuster(product_repository)

    def transition(self, order_id: str, new_status: str, notes: str = "") -> Order:
        """Move an order to *new_status* and record the change.

        Raises:
            InvalidStatus: *new_status* is not a recognised status.
            OrderNotFound: unknown or cancelled order.
            InvalidStatusTransition: the order is in a terminal status.
            CannotCancelDelivered: *new_status* is ``cancelled`` and the
                order was delivered.
        """
        target = OrderStatus.parse(new_status)
        if target == OrderStatus.CANCELLED:
            return self.cancel(order_id, notes=notes)

        with self._uow.atomic(orders=[order_id]):
            order = self._locked_order(order_id)
            log = logger.bind(
                order_id=str(order.id),
                current_status=order.status,
                new_status=target.value,
            )

            if not order.can_transition_to(target):
                log.warning("order.invalid_transition")
                raise InvalidStatusTransition(
                    f"Cannot change status of a {order.status} order.",
                    status=order.status,
                    requested=target.value,
                )

            old_status = order.status
            order.status = target
            self._order_repo.save(order)
            self._order_repo.add_history(
                order_id=order.id,
                status=target,
                notes=notes,
                old_status=old_status,
            )

        log.info("order.status_updated")
        return self._order_repo.get_by_id(str(order_id)) or order

    def cancel(self, order_id: str, notes: str = "") -> Order:
        """Restore stock for every live line, then retire the order.

        Returns the retired order; later lookups report it as not found.

        Raises:
            OrderNotFound: unknown or already cancelled order.
            CannotCancelDelivered: the order was delivered.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(f"Order not found: {order_id}", order_id=str(order_id))
        product_ids = [item.product_id for item in order.items.all()]

        with self._uow.atomic(products=product_ids, orders=[order_id]):
            # Re-read under the lock; a concurrent cancel may have won.
            order = self._locked_order(order_id)
            log = logger.bind(order_id=str(order.id), current_status=order.status)

            if not can_cancel(order.status):
                log.warning("order.cancel_not_allowed")
                raise CannotCancelDelivered(order_id=str(order.id))

            items = sorted(order.live_items(), key=lambda item: str(item.product_id))
            for item in items:
                if not self._product_repo.get_by_id(str(item.product_id)):
                    log.warning(
                        "order.restock_skipped",
                        product_id=str(item.product_id),
                        quantity=item.quantity,
                    )
                    continue
                restored = self._stock.adjust(str(item.product_id), item.quantity)
                log.info(
                    "order.stock_released",
                    product_id=str(item.product_id),
                    quantity=item.quantity,
                    restored_stock=restored,
                )

            old_status = order.status
            order.status = OrderStatus.CANCELLED
            self._order_repo.save(order)
            self._order_repo.add_history(
                order_id=order.id,
                status=OrderStatus.CANCELLED,
                notes=notes or "Order cancelled",
                old_status=old_status,
            )
            self._order_repo.retire(order)

        log.info("order.cancelled")
        return order

    def _locked_order(self, order_id: str) -> Order:
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order not found: {order_id}", order_id=str(order_id))
        return order
