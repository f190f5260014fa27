"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (Views), the validator
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``CreateOrderDTO``: validated creation payload.
- ``ListOrdersQueryDTO``: validated filters and pagination window.
- ``OrderOutputDTO``: API representation (camelCase keys, numbers for
  coordinates and amount, ISO-8601 timestamps).
- ``PaginationDTO`` / ``OrderPageDTO``: list response body.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel, ConfigDict, computed_field
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from modules.orders.models import Order


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderDTO(BaseModel):
    """Immutable, already-validated order creation request.

    Built by ``validators.validate_create``; values are normalised
    (lowercase ``order_type``, quantised decimals, trimmed addresses).
    """

    model_config = ConfigDict(frozen=True)

    pickup_address: str
    dropoff_address: str
    lat_pickup: Decimal
    lng_pickup: Decimal
    lat_dropoff: Decimal
    lng_dropoff: Decimal
    amount: Decimal
    order_type: str


class ListOrdersQueryDTO(BaseModel):
    """Immutable, already-validated list query."""

    model_config = ConfigDict(frozen=True)

    limit: int
    offset: int
    status: Optional[str] = None
    order_type: Optional[str] = None


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class OrderOutputDTO(_CamelModel):
    """Immutable DTO for order API responses."""

    order_id: int
    user_uid: str
    pickup_address: str
    dropoff_address: str
    lat_pickup: float
    lng_pickup: float
    lat_dropoff: float
    lng_dropoff: float
    amount: float
    order_type: str
    status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, order: Order) -> OrderOutputDTO:
        return cls(
            order_id=order.id,
            user_uid=order.user_uid,
            pickup_address=order.pickup_address,
            dropoff_address=order.dropoff_address,
            lat_pickup=float(order.lat_pickup),
            lng_pickup=float(order.lng_pickup),
            lat_dropoff=float(order.lat_dropoff),
            lng_dropoff=float(order.lng_dropoff),
            amount=float(order.amount),
            order_type=order.order_type,
            status=order.status,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )

    def to_response(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class PaginationDTO(_CamelModel):
    total: int
    limit: int
    offset: int

    @computed_field(alias="hasMore")  # type: ignore[prop-decorator]
    @property
    def has_more(self) -> bool:
        # Window-based, not page-based: kept for client compatibility.
        return self.offset + self.limit < self.total


class OrderPageDTO(_CamelModel):
    orders: List[OrderOutputDTO]
    pagination: PaginationDTO

    def to_response(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
