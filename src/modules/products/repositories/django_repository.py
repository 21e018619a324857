"""Django ORM implementation of the Product repository.

Reads return ``None`` instead of raising; the catalog service decides
which error kind a missing product becomes.  Retired products are
invisible to every read.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F, QuerySet
from django.utils import timezone

from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

NON_STOCK_FIELDS = [
    field.name
    for field in Product._meta.concrete_fields
    if not field.primary_key and field.name not in ("stock", "created_at")
]


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Product]:
        try:
            return Product.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[Product]:
        """Live products, newest first, as a lazy queryset.

        The API layer narrows it further with its filter backends.
        """
        queryset = Product.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset.order_by("-created_at", "-id")

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        if entity._state.adding:
            entity.save()
        else:
            # The counter belongs to apply_stock_delta; a stale in-memory
            # value must not overwrite it.
            entity.save(update_fields=NON_STOCK_FIELDS)
        logger.info("product.saved", product_id=str(entity.id))
        return entity

    @transaction.atomic
    def retire(self, id: str) -> bool:
        product = self.get_by_id(id)
        if not product:
            return False
        product.retire()
        logger.info("product.retired", product_id=str(id))
        return True

    # ------------------------------------------------------------------
    # Stock
    # ------------------------------------------------------------------

    def get_for_update(self, id: str) -> Optional[Product]:
        try:
            return Product.objects.select_for_update().alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def apply_stock_delta(self, id: str, delta: int) -> Optional[int]:
        """Compare-and-swap on the counter: ``WHERE stock >= -delta``."""
        guarded = Product.objects.alive().filter(id=id)
        if delta < 0:
            guarded = guarded.filter(stock__gte=-delta)
        updated = guarded.update(stock=F("stock") + delta, updated_at=timezone.now())
        if not updated:
            return None
        return Product.objects.filter(id=id).values_list("stock", flat=True).first()
