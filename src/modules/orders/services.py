"""Order ledger (Use Cases).

Creates orders against the catalog and answers order queries.  Status
changes and cancellation live in ``modules.orders.state_machine``.

Business rules enforced:
- An order needs a user and at least one line; the user must exist.
- Every referenced product must exist; demand for a product is summed
  across all of its lines before being compared with stock.
- Either every line is committed (stock decremented, order and items
  persisted, history recorded) or nothing is.
- Item prices are snapshotted from the catalog and the total is frozen.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog

from modules.core.locking import UnitOfWork
from modules.orders.constants import OrderStatus
from modules.orders.exceptions import (
    MissingFields,
    OrderNotFound,
    ProductNotFound,
    ProductOutOfStock,
    UserNotFound,
)
from modules.products.stock import StockAdjuster

if TYPE_CHECKING:
    from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository
    from modules.users.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)

CENTS = Decimal("0.01")


class OrderLedger:
    """Application service for order creation and lookup.

    Receives repositories via constructor injection.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        user_repository: IUserRepository,
        product_repository: IProductRepository,
        unit_of_work: Optional[UnitOfWork] = None,
    ) -> None:
        self._order_repo = order_repository
        self._user_repo = user_repository
        self._product_repo = product_repository
        self._uow = unit_of_work or UnitOfWork()
        self._stock = StockAdjuster(product_repository)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(self, dto: CreateOrderDTO) -> Order:
        """Validate, price and commit an order in one unit of work.

        Steps:
        1. Reject a request without a user or without lines.
        2. Lock every referenced product (sorted keys).
        3. Check the user, then resolve each line in request order,
           accumulating demand per product.
        4. Decrement stock (sorted by product id), persist the order and
           its items, and record the initial history entry.

        Raises:
            MissingFields: ``user_id`` absent or ``items`` absent/empty.
            UserNotFound: the user does not exist.
            ProductNotFound: a referenced product does not exist.
            ProductOutOfStock: accumulated demand exceeds stock.
        """
        if not dto.user_id or not dto.items:
            raise MissingFields(
                "Missing required fields: user_id, items (array)",
                fields=[
                    name
                    for name, value in (("user_id", dto.user_id), ("items", dto.items))
                    if not value
                ],
            )

        log = logger.bind(user_id=str(dto.user_id), item_count=len(dto.items))
        log.info("order.creation_started")

        with self._uow.atomic(products=[item.product_id for item in dto.items]):
            if not self._user_repo.get_by_id(str(dto.user_id)):
                raise UserNotFound(
                    f"User not found: {dto.user_id}", user_id=str(dto.user_id)
                )

            lines = self._price_lines(dto.items)
            total = sum(
                (line["price"] * line["quantity"] for line in lines), Decimal("0")
            ).quantize(CENTS)

            for line in sorted(lines, key=lambda line: str(line["product_id"])):
                self._stock.adjust(str(line["product_id"]), -line["quantity"])

            order = self._order_repo.create(
                {
                    "user_id": dto.user_id,
                    "total": total,
                    "shipping_address": dto.shipping_address,
                    "items": lines,
                }
            )
            self._order_repo.add_history(
                order_id=order.id,
                status=OrderStatus.PENDING,
                notes="Order created",
            )

        log.info("order.created", order_id=str(order.id), total=str(total))

        # Re-fetch with prefetch for output
        return self._order_repo.get_by_id(str(order.id)) or order

    def _price_lines(self, items: List[CreateOrderItemDTO]) -> List[Dict[str, Any]]:
        # Row locks are taken in sorted order; validation walks the request
        # order so the first failing line is the one reported.
        products: Dict[str, Optional[Product]] = {
            product_id: self._product_repo.get_for_update(product_id)
            for product_id in sorted({item.product_id for item in items})
        }

        demand: Dict[str, int] = {}
        lines: List[Dict[str, Any]] = []
        for item in items:
            product = products[item.product_id]
            if not product:
                raise ProductNotFound(
                    f"Product not found: {item.product_id}",
                    product_id=item.product_id,
                )

            key = str(product.id)
            demand[key] = demand.get(key, 0) + item.quantity
            if product.stock < demand[key]:
                logger.warning(
                    "order.insufficient_stock",
                    product_id=key,
                    requested=demand[key],
                    available=product.stock,
                )
                raise ProductOutOfStock.for_product(
                    product.id,
                    product.name,
                    requested=demand[key],
                    available=product.stock,
                )

            lines.append(
                {
                    "product_id": product.id,
                    "quantity": item.quantity,
                    "price": product.price,
                }
            )
        return lines

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """Retrieve a live order with its live items.

        Raises:
            OrderNotFound: unknown or cancelled order.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(f"Order not found: {order_id}", order_id=str(order_id))
        return order

    def list_orders(
        self, user_id: Optional[str] = None, status: Optional[str] = None
    ) -> List[Order]:
        """Return live orders, newest first.

        Raises:
            InvalidStatus: *status* is not a recognised status.
        """
        filters: Dict[str, Any] = {}
        if user_id:
            filters["user_id"] = user_id
        if status:
            filters["status"] = OrderStatus.parse(status).value
        return self._order_repo.list(filters)
