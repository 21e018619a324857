"""Product API views.

Thin adapter over ``ProductCatalog``: parse the request into a DTO,
call the service, serialize the result.  Engine errors propagate to
``modules.core.exception_handler``.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.dtos import drop_nulls, parse_dto
from modules.core.exceptions import MissingFields
from modules.products.dtos import AdjustStockDTO, CreateProductDTO, UpdateProductDTO
from modules.products.filters import ProductFilter
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer
from modules.products.services import ProductCatalog


class ProductViewSet(GenericViewSet):
    """ViewSet for Product operations.

    Listing is narrowed by ``ProductFilter`` (category, price range) and
    ``?search=`` over name and description.  Writes go through
    ``ProductCatalog`` only.
    """

    filterset_class = ProductFilter
    search_fields = ["name", "description"]
    filter_backends = [DjangoFilterBackend, SearchFilter]
    queryset = Product.objects.alive()
    serializer_class = ProductSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._catalog = ProductCatalog(repository=ProductDjangoRepository())

    def get_queryset(self):
        return self._catalog.list_products()

    def list(self, request: Request) -> Response:
        """GET /api/v1/products/?category=&min_price=&max_price=&search="""
        products = self.filter_queryset(self.get_queryset())
        data = ProductSerializer(products, many=True).data
        return Response({"results": data, "count": len(data)})

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        product = self._catalog.get_product(pk)
        return Response(ProductSerializer(product).data)

    def create(self, request: Request) -> Response:
        dto = parse_dto(CreateProductDTO, drop_nulls(request.data))
        product = self._catalog.create_product(dto)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/products/{pk}/ (partial in both cases)."""
        dto = parse_dto(UpdateProductDTO, drop_nulls(request.data))
        product = self._catalog.update_product(pk, dto)
        return Response(ProductSerializer(product).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        self._catalog.delete_product(pk)
        return Response({"detail": "Product deleted successfully."})

    @action(detail=True, methods=["patch"], url_path="stock")
    def stock(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/stock/ with ``{"quantity": delta}``."""
        if request.data.get("quantity") is None:
            raise MissingFields("Missing required fields: quantity")
        dto = parse_dto(AdjustStockDTO, {"quantity": request.data["quantity"]})
        level = self._catalog.adjust_stock(pk, dto.quantity)
        return Response(level.model_dump())
