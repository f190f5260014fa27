"""Order repository interface.

The Service Layer depends exclusively on this contract (DIP).  Every
read takes the owner's uid: an order belonging to someone else is
indistinguishable from one that does not exist.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional, Tuple

if TYPE_CHECKING:
    from modules.orders.dtos import CreateOrderDTO, ListOrdersQueryDTO
    from modules.orders.models import Order


class IOrderRepository(ABC):
    """Repository contract for orders."""

    @abstractmethod
    def create(self, owner_id: str, dto: CreateOrderDTO) -> Order:
        """Insert a ``pending`` order for ``owner_id`` and return the stored row."""

    @abstractmethod
    def list(
        self, owner_id: str, query: ListOrdersQueryDTO
    ) -> Tuple[List[Order], int]:
        """Return one page of the owner's orders (newest first) and the total
        number of orders matching the same filters."""

    @abstractmethod
    def get_by_id(self, owner_id: str, order_id: int) -> Optional[Order]:
        """Retrieve one of the owner's orders, ``None`` when there is no match."""
