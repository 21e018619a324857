"""Generic repository interface.

``IRepository[T]`` is the base every module-level repository contract
extends.  Services depend on these abstractions only; the Django ORM
implementations live next to them in ``django_repository.py``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base repository contract.

    Reads never return retired rows; a missing or malformed id yields
    ``None`` and the service decides which error kind to raise.
    """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an entity by its primary key."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[T]:
        """List entities with optional filters."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Persist (create or update) an entity."""
