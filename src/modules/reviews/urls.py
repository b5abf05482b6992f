from django.urls import path

from modules.reviews.views import ProductReviewsView

urlpatterns = [
    path(
        "products/<int:product_id>/reviews/",
        ProductReviewsView.as_view(),
        name="product-reviews",
    ),
]
