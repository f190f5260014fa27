"""Request validation for the orders resource.

Pure functions: no database access, no request objects.  Checks run in a
fixed order and the first failure wins:

1. missing fields (all of them reported at once),
2. pickup latitude, pickup longitude, dropoff latitude, dropoff longitude,
3. amount,
4. order type,
5. address types.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping

from modules.orders.constants import (
    AMOUNT_DECIMAL_PLACES,
    AMOUNT_MAX_EXCLUSIVE,
    COORDINATE_DECIMAL_PLACES,
    DEFAULT_PAGE_LIMIT,
    LATITUDE_RANGE,
    LONGITUDE_RANGE,
    MAX_ORDER_ID,
    MAX_PAGE_LIMIT,
    MIN_PAGE_LIMIT,
    REQUIRED_CREATE_FIELDS,
    OrderStatus,
    OrderType,
)
from modules.orders.dtos import CreateOrderDTO, ListOrdersQueryDTO
from modules.orders.exceptions import (
    InvalidAddress,
    InvalidAmount,
    InvalidCoordinate,
    InvalidId,
    InvalidOrderType,
    InvalidStatus,
    MissingFields,
    OrderNotFound,
)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_ORDER_ID = re.compile(r"^[+-]?\d+$")

# (payload field, bounds, label used in the error message)
_COORDINATE_CHECKS = (
    ("latPickup", LATITUDE_RANGE, "pickup latitude"),
    ("lngPickup", LONGITUDE_RANGE, "pickup longitude"),
    ("latDropoff", LATITUDE_RANGE, "dropoff latitude"),
    ("lngDropoff", LONGITUDE_RANGE, "dropoff longitude"),
)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_missing(value: Any) -> bool:
    """Absent or falsy, except that a numeric zero counts as present."""
    if _is_number(value):
        return False
    return not value


def _quantize(value: int | float, places: int) -> Decimal:
    exponent = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)


def _check_coordinate(payload: Mapping[str, Any], field: str, bounds, label: str) -> Decimal:
    value = payload[field]
    low, high = bounds
    # range comparison also rejects nan, inf and arbitrarily large ints
    if not _is_number(value) or not low <= value <= high:
        raise InvalidCoordinate(
            field, f"Invalid {label}. Must be between {low} and {high}"
        )
    return _quantize(value, COORDINATE_DECIMAL_PLACES)


def _check_amount(value: Any) -> Decimal:
    # bounds checked on the raw number so quantizing never sees huge values
    if not _is_number(value) or not 0 < value < AMOUNT_MAX_EXCLUSIVE:
        raise InvalidAmount()
    amount = _quantize(value, AMOUNT_DECIMAL_PLACES)
    # rounding may still push it to 0.00 or onto the DECIMAL(10, 2) limit
    if amount <= 0 or amount >= AMOUNT_MAX_EXCLUSIVE:
        raise InvalidAmount()
    return amount


def _check_order_type(value: Any) -> str:
    valid = [choice.value for choice in OrderType]
    normalised = value.lower() if isinstance(value, str) else None
    if normalised not in valid:
        raise InvalidOrderType(
            f"Invalid order type. Must be one of: {', '.join(valid)}"
        )
    return normalised


def _check_address(value: Any, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidAddress(f"Invalid {label} address. Must be a non-empty string")
    return value.strip()


def validate_create(payload: Any) -> CreateOrderDTO:
    """Validate an order creation payload (camelCase JSON keys).

    Raises:
        MissingFields, InvalidCoordinate, InvalidAmount, InvalidOrderType,
        InvalidAddress: first failing check, in that order.
    """
    if not isinstance(payload, Mapping):
        payload = {}

    missing = [f for f in REQUIRED_CREATE_FIELDS if is_missing(payload.get(f))]
    if missing:
        raise MissingFields(missing)

    coordinates = {
        field: _check_coordinate(payload, field, bounds, label)
        for field, bounds, label in _COORDINATE_CHECKS
    }
    amount = _check_amount(payload["amount"])
    order_type = _check_order_type(payload["orderType"])

    return CreateOrderDTO(
        pickup_address=_check_address(payload["pickupAddress"], "pickup"),
        dropoff_address=_check_address(payload["dropoffAddress"], "dropoff"),
        lat_pickup=coordinates["latPickup"],
        lng_pickup=coordinates["lngPickup"],
        lat_dropoff=coordinates["latDropoff"],
        lng_dropoff=coordinates["lngDropoff"],
        amount=amount,
        order_type=order_type,
    )


def parse_int(value: Any, default: int) -> int:
    """Leading-integer parse (``"15abc"`` -> 15); ``default`` when there is none."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if not isinstance(value, str):
        return default
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else default


def validate_list_query(params: Mapping[str, Any]) -> ListOrdersQueryDTO:
    """Validate list filters and clamp the pagination window.

    ``orderType`` is lowercased but not checked against the known types;
    unknown values simply match nothing.

    Raises:
        InvalidStatus: ``status`` is present but not a lifecycle status.
    """
    limit = parse_int(params.get("limit"), DEFAULT_PAGE_LIMIT)
    limit = min(max(limit, MIN_PAGE_LIMIT), MAX_PAGE_LIMIT)
    offset = max(parse_int(params.get("offset"), 0), 0)

    status = params.get("status") or None
    valid_statuses = [choice.value for choice in OrderStatus]
    if status is not None and status not in valid_statuses:
        raise InvalidStatus(
            f"Invalid status. Must be one of: {', '.join(valid_statuses)}"
        )

    order_type = params.get("orderType") or None
    if order_type is not None:
        order_type = str(order_type).lower()

    return ListOrdersQueryDTO(
        limit=limit,
        offset=offset,
        status=status,
        order_type=order_type,
    )


def parse_order_id(raw: Any) -> int:
    """Parse the ``{orderId}`` path segment.

    Raises:
        InvalidId: not a base-10 integer.
        OrderNotFound: an integer no order can have.
    """
    text = str(raw).strip() if raw is not None else ""
    if not _ORDER_ID.match(text):
        raise InvalidId()
    order_id = int(text)
    if not 1 <= order_id <= MAX_ORDER_ID:
        raise OrderNotFound()
    return order_id
