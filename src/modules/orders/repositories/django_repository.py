"""Django ORM implementation of the Order repository.

Listing filters are assembled from ``Predicate`` tuples: the owner
predicate always comes first and every predicate is ANDed.  Values are
only ever passed to the ORM as lookup arguments, never formatted into
SQL.
"""

from __future__ import annotations

from typing import Any, List, NamedTuple, Optional, Tuple

import structlog
from django.db import transaction
from django.db.models import Q

from modules.orders.constants import OrderStatus
from modules.orders.dtos import CreateOrderDTO, ListOrdersQueryDTO
from modules.orders.exceptions import PersistenceError
from modules.orders.models import Order
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

# Stable page order: newest first, ties broken by id.
PAGE_ORDERING = ("-created_at", "-id")


class Predicate(NamedTuple):
    column: str
    operator: str
    value: Any

    def to_q(self) -> Q:
        lookup = self.column if self.operator == "exact" else f"{self.column}__{self.operator}"
        return Q(**{lookup: self.value})


def build_predicates(owner_id: str, query: ListOrdersQueryDTO) -> List[Predicate]:
    predicates = [Predicate("user_uid", "exact", owner_id)]
    if query.status:
        predicates.append(Predicate("status", "exact", query.status))
    if query.order_type:
        predicates.append(Predicate("order_type", "exact", query.order_type))
    return predicates


def combine(predicates: List[Predicate]) -> Q:
    condition = Q()
    for predicate in predicates:
        condition &= predicate.to_q()
    return condition


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    def create(self, owner_id: str, dto: CreateOrderDTO) -> Order:
        """Insert and read back in one transaction.

        The read-back returns the row as stored (quantised decimals,
        database timestamps).
        """
        with transaction.atomic():
            order = Order.objects.create(
                user_uid=owner_id,
                pickup_address=dto.pickup_address,
                dropoff_address=dto.dropoff_address,
                lat_pickup=dto.lat_pickup,
                lng_pickup=dto.lng_pickup,
                lat_dropoff=dto.lat_dropoff,
                lng_dropoff=dto.lng_dropoff,
                amount=dto.amount,
                order_type=dto.order_type,
                status=OrderStatus.PENDING,
            )
            stored = Order.objects.filter(pk=order.pk).first()
            if stored is None:
                raise PersistenceError("Failed to create order. Please try again.")

        logger.info("order.persisted", order_id=stored.id, user_uid=owner_id)
        return stored

    def list(
        self, owner_id: str, query: ListOrdersQueryDTO
    ) -> Tuple[List[Order], int]:
        queryset = Order.objects.filter(combine(build_predicates(owner_id, query)))
        total = queryset.count()
        page = queryset.order_by(*PAGE_ORDERING)[query.offset : query.offset + query.limit]
        return list(page), total

    def get_by_id(self, owner_id: str, order_id: int) -> Optional[Order]:
        return Order.objects.filter(pk=order_id, user_uid=owner_id).first()
