"""Order API views.

Exposes ``OrderLedger`` and ``OrderStatusMachine`` via HTTP using a DRF
ViewSet.  Engine errors propagate to ``modules.core.exception_handler``;
the view never catches them itself.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.core.dtos import parse_dto
from modules.core.locking import UnitOfWork
from modules.orders.dtos import CreateOrderDTO, OrderFilterDTO, UpdateStatusDTO
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import OrderListSerializer, OrderSerializer
from modules.orders.services import OrderLedger
from modules.orders.state_machine import OrderStatusMachine
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.users.repositories.django_repository import UserDjangoRepository


class OrderViewSet(ViewSet):
    """ViewSet for Order operations.

    Does **not** touch the ORM: every read and write goes through the
    ledger or the status machine, which share one ``UnitOfWork``.
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        orders = OrderDjangoRepository()
        products = ProductDjangoRepository()
        unit_of_work = UnitOfWork()
        self._ledger = OrderLedger(
            order_repository=orders,
            user_repository=UserDjangoRepository(),
            product_repository=products,
            unit_of_work=unit_of_work,
        )
        self._machine = OrderStatusMachine(
            order_repository=orders,
            product_repository=products,
            unit_of_work=unit_of_work,
        )

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        dto = parse_dto(CreateOrderDTO, request.data)
        order = self._ledger.create_order(dto)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/?user_id=&status="""
        filters = parse_dto(
            OrderFilterDTO,
            {
                key: request.query_params[key]
                for key in ("user_id", "status")
                if request.query_params.get(key)
            },
        )
        orders = self._ledger.list_orders(
            user_id=filters.user_id, status=filters.status
        )
        data = OrderListSerializer(orders, many=True).data
        return Response({"results": data, "count": len(data)})

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        order = self._ledger.get_order(pk)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/status/ with ``{"status", "notes"}``.

        ``cancelled`` is accepted and behaves like ``DELETE``.
        """
        dto = parse_dto(UpdateStatusDTO, request.data)
        order = self._machine.transition(pk, dto.status, notes=dto.notes)
        if order.is_retired:
            return Response({"detail": "Order cancelled successfully."})
        return Response(OrderSerializer(order).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/orders/{pk}/ cancels the order and restores stock."""
        self._machine.cancel(pk, notes=request.data.get("notes", "") or "")
        return Response({"detail": "Order cancelled successfully."})
