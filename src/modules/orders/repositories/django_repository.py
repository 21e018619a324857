"""Django ORM implementation of the Order repository.

Reads only ever see live (non-retired) orders and items, and the
ledger writes an order and its items inside the caller's unit of work,
so an in-flight order is never visible to other readers.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Prefetch

from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

FILTER_KEYS = ("user_id", "status")


def _with_items(queryset):
    return queryset.select_related("user").prefetch_related(
        Prefetch(
            "items",
            queryset=OrderItem.objects.alive().select_related("product"),
        ),
        "status_history",
    )


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        order = Order.objects.create(
            user_id=data["user_id"],
            total=data["total"],
            shipping_address=data.get("shipping_address", ""),
        )
        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product_id=item["product_id"],
                    quantity=item["quantity"],
                    price=item["price"],
                )
                for item in data["items"]
            ]
        )
        logger.info(
            "order.persisted", order_id=str(order.id), item_count=len(data["items"])
        )
        return order

    def get_by_id(self, id: str) -> Optional[Order]:
        """Returns ``None`` for unknown, retired or malformed ids."""
        try:
            return _with_items(Order.objects.alive()).filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        try:
            return Order.objects.select_for_update().alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        queryset = _with_items(Order.objects.alive())
        lookups = {
            key: value
            for key, value in (filters or {}).items()
            if key in FILTER_KEYS and value is not None
        }
        try:
            return list(queryset.filter(**lookups).order_by("-created_at", "-id"))
        except (ValueError, ValidationError):
            # Malformed user id: nothing can match it.
            return []

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        entity.save()
        logger.info("order.saved", order_id=str(entity.id), status=entity.status)
        return entity

    @transaction.atomic
    def retire(self, order: Order) -> Order:
        retired_items = OrderItem.objects.filter(order_id=order.id).retire()
        order.retire()
        logger.info(
            "order.retired", order_id=str(order.id), item_count=retired_items
        )
        return order

    @transaction.atomic
    def add_history(
        self,
        order_id: Any,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=status,
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=str(order_id),
            old_status=old_status,
            new_status=status,
        )
        return history
