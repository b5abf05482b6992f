"""Product API views.

Exposes the ``ProductService`` via HTTP using a DRF ViewSet.
Domain exceptions are caught and translated into appropriate
HTTP status codes; the view never swallows generic exceptions.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import pydantic_error_message
from modules.core.pagination import StandardResultsSetPagination
from modules.products.dtos import CreateProductDTO, UpdateProductDTO
from modules.products.exceptions import ProductNotFound
from modules.products.filters import ProductFilter
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductCardSerializer, ProductSerializer
from modules.products.services import ProductService

PRODUCT_NOT_FOUND = "Product not found."

PRODUCT_FIELDS = ("name", "price", "description", "stock", "image_url", "is_featured")


class CatalogPagination(StandardResultsSetPagination):
    results_key = "products"


class ProductViewSet(GenericViewSet):
    """ViewSet for the catalog.

    Reads (list, retrieve, home) are public; writes require a staff user.
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    serializer_class = ProductCardSerializer
    filterset_class = ProductFilter
    filter_backends = [DjangoFilterBackend]
    pagination_class = CatalogPagination
    lookup_value_regex = r"\d+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    def get_permissions(self):
        if self.action in {"list", "retrieve", "home"}:
            return [AllowAny()]
        return [IsAdminUser()]

    def get_queryset(self):
        return self._service.catalog()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/products/?page=&perPage=&sort=&keyword="""
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = ProductCardSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/"""
        try:
            product = self._service.get_product(int(pk))
        except ProductNotFound:
            return Response(
                {"message": PRODUCT_NOT_FOUND}, status=status.HTTP_404_NOT_FOUND
            )
        return Response(ProductSerializer(product).data)

    @action(detail=False, methods=["get"])
    def home(self, request: Request) -> Response:
        """GET /api/v1/products/home/"""
        sections = self._service.home_sections()
        return Response(
            {
                key: ProductCardSerializer(products, many=True).data
                for key, products in sections.items()
            }
        )

    # ------------------------------------------------------------------
    # Staff writes
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/products/"""
        data = {f: request.data[f] for f in PRODUCT_FIELDS if f in request.data}
        try:
            dto = CreateProductDTO(**data)
        except PydanticValidationError as exc:
            return Response(
                {"message": pydantic_error_message(exc)},
                status=status.HTTP_400_BAD_REQUEST,
            )

        product = self._service.create_product(dto)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/products/{pk}/"""
        data = {f: request.data[f] for f in PRODUCT_FIELDS if f in request.data}
        try:
            dto = UpdateProductDTO(**data)
        except PydanticValidationError as exc:
            return Response(
                {"message": pydantic_error_message(exc)},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            product = self._service.update_product(int(pk), dto)
        except ProductNotFound:
            return Response(
                {"message": PRODUCT_NOT_FOUND}, status=status.HTTP_404_NOT_FOUND
            )
        return Response(ProductSerializer(product).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/"""
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}/ (soft delete)"""
        try:
            self._service.delete_product(int(pk))
        except ProductNotFound:
            return Response(
                {"message": PRODUCT_NOT_FOUND}, status=status.HTTP_404_NOT_FOUND
            )
        return Response(status=status.HTTP_204_NO_CONTENT)
