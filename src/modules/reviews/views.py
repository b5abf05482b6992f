"""Review API views (nested under a product)."""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.pagination import StandardResultsSetPagination
from modules.products.exceptions import ProductNotFound
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.reviews.serializers import ReviewCreateSerializer, ReviewSerializer
from modules.reviews.services import ReviewService


class ReviewPagination(StandardResultsSetPagination):
    page_size = 10
    page_size_query_param = None
    results_key = "reviews"


class ProductReviewsView(APIView):
    """GET (public) / POST (authenticated) /api/v1/products/{product_id}/reviews/"""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ReviewService(product_repository=ProductDjangoRepository())

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated()]
        return [AllowAny()]

    def get(self, request: Request, product_id: int) -> Response:
        paginator = ReviewPagination()
        page = paginator.paginate_queryset(
            self._service.list_for_product(product_id), request, view=self
        )
        return Response(
            {
                "reviews": ReviewSerializer(page, many=True).data,
                "review_avg": self._service.average_rating(product_id),
                "pagination": paginator.get_pagination_block(),
            }
        )

    def post(self, request: Request, product_id: int) -> Response:
        serializer = ReviewCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            self._service.add_review(
                product_id=product_id,
                user_id=request.user.pk,
                rating=serializer.validated_data["rating"],
                content=serializer.validated_data["content"],
            )
        except ProductNotFound:
            return Response(
                {"message": "Product not found."}, status=status.HTTP_404_NOT_FOUND
            )
        return Response(
            {"message": "Review registered successfully."},
            status=status.HTTP_201_CREATED,
        )
