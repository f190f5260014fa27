"""Integration tests for POST /orders.

Covers:
- Success 201: normalised order owned by the caller.
- Validation 400: missing fields, coordinates, amount, order type, addresses.
- Nothing is stored when validation fails.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.models import Order

pytestmark = pytest.mark.integration


class TestCreateOrderSuccess:
    def test_creates_pending_order(self, user_client, order_payload):
        response = user_client.post("/orders", order_payload, format="json")

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Order created successfully"
        order = data["order"]
        assert order["orderType"] == "delivery"
        assert order["status"] == "pending"
        assert order["userUid"] == "user-a"
        assert order["pickupAddress"] == "A"
        assert order["dropoffAddress"] == "B"
        assert order["latPickup"] == 40.7
        assert order["lngDropoff"] == -73.9
        assert order["amount"] == 25.5
        assert isinstance(order["orderId"], int)
        assert order["createdAt"]
        assert order["updatedAt"]

    def test_persists_row(self, user_client, order_payload):
        response = user_client.post("/orders", order_payload, format="json")

        stored = Order.objects.get(pk=response.json()["order"]["orderId"])
        assert stored.user_uid == "user-a"
        assert stored.status == OrderStatus.PENDING
        assert stored.amount == Decimal("25.50")

    def test_owner_comes_from_token_not_body(self, user_client, order_payload):
        order_payload["userUid"] = "someone-else"
        response = user_client.post("/orders", order_payload, format="json")
        assert response.status_code == 201
        assert response.json()["order"]["userUid"] == "user-a"

    def test_zero_coordinates_are_valid(self, user_client, order_payload):
        order_payload.update(latPickup=0, lngPickup=0, latDropoff=0.0, lngDropoff=0.0)
        response = user_client.post("/orders", order_payload, format="json")
        assert response.status_code == 201
        assert response.json()["order"]["latPickup"] == 0

    def test_boundary_coordinates_are_valid(self, user_client, order_payload):
        order_payload.update(latPickup=-90, lngPickup=180, latDropoff=90, lngDropoff=-180)
        response = user_client.post("/orders", order_payload, format="json")
        assert response.status_code == 201

    def test_addresses_are_trimmed(self, user_client, order_payload):
        order_payload.update(pickupAddress="  12 Main St ", dropoffAddress="\t9 Elm\n")
        order = user_client.post("/orders", order_payload, format="json").json()["order"]
        assert order["pickupAddress"] == "12 Main St"
        assert order["dropoffAddress"] == "9 Elm"

    def test_amount_rounded_to_cents(self, user_client, order_payload):
        order_payload["amount"] = 10.005
        order = user_client.post("/orders", order_payload, format="json").json()["order"]
        assert order["amount"] == 10.01


class TestCreateOrderValidation:
    def test_empty_body_lists_every_field(self, user_client):
        response = user_client.post("/orders", {}, format="json")
        assert response.status_code == 400
        assert response.json()["error"] == (
            "Missing required fields: pickupAddress, dropoffAddress, latPickup, "
            "lngPickup, latDropoff, lngDropoff, amount, orderType"
        )

    def test_missing_amount(self, user_client, order_payload):
        del order_payload["amount"]
        response = user_client.post("/orders", order_payload, format="json")
        assert response.status_code == 400
        assert response.json()["error"] == "Missing required fields: amount"

    def test_invalid_latitude(self, user_client, order_payload):
        order_payload["latPickup"] = 91
        response = user_client.post("/orders", order_payload, format="json")
        assert response.status_code == 400
        assert response.json()["error"] == (
            "Invalid pickup latitude. Must be between -90 and 90"
        )

    def test_coordinates_checked_in_order(self, user_client, order_payload):
        order_payload.update(lngPickup=500, latDropoff=-100)
        response = user_client.post("/orders", order_payload, format="json")
        assert response.json()["error"] == (
            "Invalid pickup longitude. Must be between -180 and 180"
        )

    def test_string_coordinate_rejected(self, user_client, order_payload):
        order_payload["lngDropoff"] = "-73.9"
        response = user_client.post("/orders", order_payload, format="json")
        assert response.status_code == 400
        assert response.json()["error"] == (
            "Invalid dropoff longitude. Must be between -180 and 180"
        )

    @pytest.mark.parametrize("amount", [-5, "25.5", 0.001, 1e30, 10**400])
    def test_invalid_amount(self, user_client, order_payload, amount):
        order_payload["amount"] = amount
        response = user_client.post("/orders", order_payload, format="json")
        assert response.status_code == 400
        assert response.json()["error"] == "Amount must be a positive number"

    def test_zero_amount_rejected(self, user_client, order_payload):
        order_payload["amount"] = 0
        response = user_client.post("/orders", order_payload, format="json")
        assert response.status_code == 400
        assert response.json()["error"] == "Amount must be a positive number"

    def test_invalid_order_type(self, user_client, order_payload):
        order_payload["orderType"] = "teleport"
        response = user_client.post("/orders", order_payload, format="json")
        assert response.status_code == 400
        assert response.json()["error"] == (
            "Invalid order type. Must be one of: delivery, pickup, express, scheduled"
        )

    def test_non_string_address(self, user_client, order_payload):
        order_payload["pickupAddress"] = 42
        response = user_client.post("/orders", order_payload, format="json")
        assert response.status_code == 400
        assert "pickup address" in response.json()["error"]

    def test_nothing_stored_on_failure(self, user_client, order_payload):
        order_payload["orderType"] = "teleport"
        user_client.post("/orders", order_payload, format="json")
        assert Order.objects.count() == 0

    def test_huge_coordinate_is_400(self, user_client, order_payload):
        order_payload["latPickup"] = 10**400
        response = user_client.post("/orders", order_payload, format="json")
        assert response.status_code == 400
        assert response.json()["error"] == (
            "Invalid pickup latitude. Must be between -90 and 90"
        )
