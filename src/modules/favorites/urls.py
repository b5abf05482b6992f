from django.urls import path

from modules.favorites.views import FavoriteDetailView, FavoriteListView

urlpatterns = [
    path("favorites/", FavoriteListView.as_view(), name="favorite-list"),
    path(
        "favorites/<int:product_id>/",
        FavoriteDetailView.as_view(),
        name="favorite-detail",
    ),
]
