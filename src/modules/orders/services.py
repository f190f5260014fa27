"""Order service layer (Use Cases).

Orchestrates validation and persistence for the three order operations.
Every operation is scoped to the verified caller's uid, which the views
take from the authenticated principal and never from the request body.

Store failures are logged with their cause and re-raised as
``PersistenceError`` carrying a generic, caller-safe message.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

import structlog
from django.db import DatabaseError

from modules.orders.dtos import OrderOutputDTO, OrderPageDTO, PaginationDTO
from modules.orders.exceptions import OrderNotFound, PersistenceError
from modules.orders.validators import (
    parse_order_id,
    validate_create,
    validate_list_query,
)

if TYPE_CHECKING:
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives the repository via constructor injection (DIP).
    """

    def __init__(self, order_repository: IOrderRepository) -> None:
        self._order_repo = order_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(self, owner_id: str, payload: Any) -> OrderOutputDTO:
        """Validate ``payload`` and store a new ``pending`` order.

        Raises:
            OrderValidationError: the payload is rejected (nothing stored).
            PersistenceError: the store failed.
        """
        dto = validate_create(payload)
        log = logger.bind(user_uid=owner_id, order_type=dto.order_type)

        try:
            order = self._order_repo.create(owner_id, dto)
        except DatabaseError as exc:
            log.error("order.create_failed", error=str(exc), exc_info=exc)
            raise PersistenceError("Failed to create order. Please try again.") from exc

        log.info("order.created", order_id=order.id, amount=str(order.amount))
        return OrderOutputDTO.from_entity(order)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_orders(self, owner_id: str, params: Mapping[str, Any]) -> OrderPageDTO:
        """Return one page of the caller's orders, newest first.

        Raises:
            InvalidStatus: unknown ``status`` filter.
            PersistenceError: the store failed.
        """
        query = validate_list_query(params)

        try:
            orders, total = self._order_repo.list(owner_id, query)
        except DatabaseError as exc:
            logger.error(
                "order.list_failed", user_uid=owner_id, error=str(exc), exc_info=exc
            )
            raise PersistenceError("Failed to retrieve orders. Please try again.") from exc

        logger.debug(
            "order.listed",
            user_uid=owner_id,
            count=len(orders),
            total=total,
            limit=query.limit,
            offset=query.offset,
        )
        return OrderPageDTO(
            orders=[OrderOutputDTO.from_entity(order) for order in orders],
            pagination=PaginationDTO(total=total, limit=query.limit, offset=query.offset),
        )

    def get_order(self, owner_id: str, raw_id: Any) -> OrderOutputDTO:
        """Retrieve one of the caller's orders.

        Raises:
            InvalidId: ``raw_id`` is not an integer.
            OrderNotFound: no such order, or it belongs to someone else.
            PersistenceError: the store failed.
        """
        order_id = parse_order_id(raw_id)

        try:
            order = self._order_repo.get_by_id(owner_id, order_id)
        except DatabaseError as exc:
            logger.error(
                "order.retrieve_failed",
                user_uid=owner_id,
                order_id=order_id,
                error=str(exc),
                exc_info=exc,
            )
            raise PersistenceError("Failed to retrieve order. Please try again.") from exc

        if order is None:
            raise OrderNotFound()
        return OrderOutputDTO.from_entity(order)
