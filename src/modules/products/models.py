"""Product model with a guarded stock counter.

Rules enforced here:
- Price is a non-negative decimal (zero allowed for giveaways).
- Stock can never be negative (model validation + DB check constraint).
- Products are retired, not deleted, so historical line items keep
  their product reference.

Stock is only written through ``StockAdjuster``; ordinary saves of a
product never touch the counter.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import SoftDeleteModel

# Largest value an IntegerField column holds on every supported backend.
MAX_STOCK = 2**31 - 1


class Product(SoftDeleteModel):
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    stock = models.IntegerField(default=0)
    category = models.CharField(max_length=100, blank=True, default="", db_index=True)
    image_url = models.URLField(max_length=500, blank=True, default="")

    class Meta:
        db_table = "products"
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="products_price_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(stock__gte=0),
                name="products_stock_non_negative",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.price is not None and self.price < 0:
            raise ValidationError({"price": "Price must be a non-negative number."})
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": "Stock cannot be negative."})

    def __str__(self) -> str:
        return f"{self.name} ({self.stock} in stock)"
