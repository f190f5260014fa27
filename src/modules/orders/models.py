"""Order model.

- ``user_uid`` is the subject of the verified token; every read is scoped
  by it.
- ``status`` is always ``pending`` on creation; nothing in this service
  transitions it.
- ``created_at`` is set once; ``updated_at`` is refreshed on every save.
- ``amount`` is stored with two decimals and must be positive (also
  enforced by a check constraint).
"""

from __future__ import annotations

from django.db import models

from modules.orders.constants import OrderStatus, OrderType


class Order(models.Model):
    id: models.BigAutoField = models.BigAutoField(primary_key=True)
    user_uid: models.CharField = models.CharField(max_length=255, db_index=True)
    pickup_address: models.TextField = models.TextField()
    dropoff_address: models.TextField = models.TextField()
    lat_pickup: models.DecimalField = models.DecimalField(max_digits=10, decimal_places=8)
    lng_pickup: models.DecimalField = models.DecimalField(max_digits=11, decimal_places=8)
    lat_dropoff: models.DecimalField = models.DecimalField(max_digits=10, decimal_places=8)
    lng_dropoff: models.DecimalField = models.DecimalField(max_digits=11, decimal_places=8)
    amount: models.DecimalField = models.DecimalField(max_digits=10, decimal_places=2)
    order_type: models.CharField = models.CharField(
        max_length=100,
        choices=OrderType.choices,
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    created_at: models.DateTimeField = models.DateTimeField(auto_now_add=True)
    updated_at: models.DateTimeField = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="orders_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"Order {self.id} ({self.status})"
