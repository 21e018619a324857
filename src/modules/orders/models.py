"""Order, OrderItem and OrderStatusHistory models.

Rules implemented:
- ``Order.total`` is computed once at creation from the snapshot prices
  and never recalculated.
- ``OrderItem.price`` snapshots the product price at order time; later
  catalog price changes never reach committed line items.
- Items are immutable after creation and retired only together with
  their order on cancellation.
- ``user`` and ``product`` FKs use PROTECT to keep referential history.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel, SoftDeleteModel
from modules.orders.constants import OrderStatus, can_transition


class Order(SoftDeleteModel):
    """Order aggregate root."""

    user = models.ForeignKey(
        "users.User",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    shipping_address = models.TextField(blank=True, default="")

    class Meta:
        db_table = "orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["user", "-created_at"], name="orders_user_created_idx"),
        ]

    def can_transition_to(self, new_status: str) -> bool:
        return can_transition(self.status, new_status)

    def live_items(self) -> models.QuerySet:
        return self.items.alive().select_related("product")

    def __str__(self) -> str:
        return f"Order {self.id} ({self.status})"


class OrderItem(SoftDeleteModel):
    """Line item: one (product, quantity, frozen price) entry of an order."""

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity

    def clean(self) -> None:
        super().clean()
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})

    def __str__(self) -> str:
        return f"{self.product_id} x{self.quantity} @ {self.price}"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail of status changes.

    Not soft-deletable: the trail of a cancelled order stays readable
    after the order itself is retired.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status = models.CharField(max_length=20, choices=OrderStatus.choices)
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        return f"{self.order_id}: {self.old_status} -> {self.new_status}"
