"""Favorite API views (authenticated caller only)."""

from __future__ import annotations

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.favorites.exceptions import FavoriteNotFound
from modules.favorites.serializers import (
    FavoriteCreateSerializer,
    FavoriteProductSerializer,
)
from modules.favorites.services import FavoriteService
from modules.products.exceptions import ProductNotFound
from modules.products.repositories.django_repository import ProductDjangoRepository


class _FavoriteView(APIView):
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = FavoriteService(product_repository=ProductDjangoRepository())


class FavoriteListView(_FavoriteView):
    """GET / POST /api/v1/favorites/"""

    def get(self, request: Request) -> Response:
        products = self._service.list_products(request.user.pk)
        return Response(FavoriteProductSerializer(products, many=True).data)

    def post(self, request: Request) -> Response:
        serializer = FavoriteCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            self._service.add(request.user.pk, serializer.validated_data["productId"])
        except ProductNotFound:
            return Response(
                {"message": "Product not found."}, status=status.HTTP_404_NOT_FOUND
            )
        return Response({"message": "Product has been added to favorites."})


class FavoriteDetailView(_FavoriteView):
    """GET / DELETE /api/v1/favorites/{product_id}/"""

    def get(self, request: Request, product_id: int) -> Response:
        return Response(
            {"isFavorite": self._service.is_favorite(request.user.pk, product_id)}
        )

    def delete(self, request: Request, product_id: int) -> Response:
        try:
            self._service.remove(request.user.pk, product_id)
        except FavoriteNotFound:
            return Response(
                {"message": "Favorite not found."}, status=status.HTTP_404_NOT_FOUND
            )
        return Response({"message": "Removed from favorites."})
