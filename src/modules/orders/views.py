"""Order API views.

Exposes the ``OrderService`` via HTTP using a DRF ViewSet.  Domain
exceptions propagate to ``api_exception_handler``; the view only shapes
successful responses.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import ViewSet

from modules.core.throttling import (
    GeneralRateThrottle,
    RateLimitFirstMixin,
    StrictRateThrottle,
)
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import OrderService


class OrderViewSet(RateLimitFirstMixin, ViewSet):
    """ViewSet for Order operations.

    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    lookup_field = "order_id"
    # any segment reaches parse_order_id, so "1.5" is a 400 and not a routing 404
    lookup_value_regex = "[^/]+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(order_repository=OrderDjangoRepository())

    def get_throttles(self) -> list[BaseThrottle]:
        throttles: list[BaseThrottle] = [GeneralRateThrottle()]
        if self.action == "create":
            throttles.append(StrictRateThrottle())
        return throttles

    def create(self, request: Request) -> Response:
        """POST /orders"""
        order = self._service.create_order(request.user.uid, request.data)
        return Response(
            {"message": "Order created successfully", "order": order.to_response()},
            status=status.HTTP_201_CREATED,
        )

    def list(self, request: Request) -> Response:
        """GET /orders"""
        page = self._service.list_orders(request.user.uid, request.query_params)
        return Response({"message": "Orders retrieved successfully", **page.to_response()})

    def retrieve(self, request: Request, order_id: str | None = None) -> Response:
        """GET /orders/{orderId}"""
        order = self._service.get_order(request.user.uid, order_id)
        return Response(
            {"message": "Order retrieved successfully", "order": order.to_response()}
        )
