"""Order domain constants.

Closed sets for order type and lifecycle status, plus the limits used by
request validation.  Only ``pending`` is ever written by this service;
the remaining statuses exist for listing filters.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    IN_PROGRESS = "in_progress", "In progress"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class OrderType(models.TextChoices):
    DELIVERY = "delivery", "Delivery"
    PICKUP = "pickup", "Pickup"
    EXPRESS = "express", "Express"
    SCHEDULED = "scheduled", "Scheduled"


REQUIRED_CREATE_FIELDS: tuple[str, ...] = (
    "pickupAddress",
    "dropoffAddress",
    "latPickup",
    "lngPickup",
    "latDropoff",
    "lngDropoff",
    "amount",
    "orderType",
)

LATITUDE_RANGE = (-90, 90)
LONGITUDE_RANGE = (-180, 180)

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100
MIN_PAGE_LIMIT = 1

# amount is DECIMAL(10, 2)
AMOUNT_DECIMAL_PLACES = 2
AMOUNT_MAX_EXCLUSIVE = 10**8
COORDINATE_DECIMAL_PLACES = 8

# BigAutoField upper bound
MAX_ORDER_ID = 2**63 - 1
