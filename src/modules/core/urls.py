from django.urls import path

from modules.core.views import (
    LoginView,
    LogoutView,
    MeView,
    PasswordChangeView,
    UserView,
    health_check,
)

urlpatterns = [
    path("health", health_check, name="health_check"),
    path("api/v1/me", MeView.as_view(), name="me"),
    path("api/v1/auth/login/", LoginView.as_view(), name="auth_login"),
    path("api/v1/auth/logout/", LogoutView.as_view(), name="auth_logout"),
    path("api/v1/users/", UserView.as_view(), name="users"),
    path(
        "api/v1/users/password/",
        PasswordChangeView.as_view(),
        name="users_password",
    ),
]
