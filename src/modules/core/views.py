import time
from typing import Any, Dict

import structlog
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.authentication import issue_access_token
from modules.core.exceptions import EmailAlreadyRegistered, IncorrectPassword
from modules.core.serializers import (
    LoginSerializer,
    PasswordChangeSerializer,
    ProfileSerializer,
    RegisterSerializer,
)
from modules.core.services import AccountService

logger = structlog.get_logger()

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password."


def health_check(request: HttpRequest) -> JsonResponse:
    services: Dict[str, Dict[str, Any]] = {}
    overall_healthy = True

    # Check database
    try:
        start = time.monotonic()
        conn = connections["default"]
        conn.ensure_connection()
        with conn.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        services["database"] = {
            "status": "up",
            "response_time_ms": round((time.monotonic() - start) * 1000, 2),
        }
    except Exception:
        services["database"] = {"status": "down"}
        overall_healthy = False
        logger.exception("health_check_db_failure")

    # Check cache (Redis in production, locmem in tests)
    try:
        start = time.monotonic()
        cache.set("_storefront_health", "ok", 10)
        if cache.get("_storefront_health") != "ok":
            raise ConnectionError("Cache read failed")
        services["cache"] = {
            "status": "up",
            "response_time_ms": round((time.monotonic() - start) * 1000, 2),
        }
    except Exception:
        services["cache"] = {"status": "down"}
        overall_healthy = False
        logger.exception("health_check_cache_failure")

    status_code = 200 if overall_healthy else 503

    logger.info(
        "health_check_completed", status="healthy" if overall_healthy else "unhealthy"
    )

    return JsonResponse(
        {
            "status": "healthy" if overall_healthy else "unhealthy",
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=status_code,
    )


def _user_payload(user) -> Dict[str, Any]:
    return {
        "id": user.pk,
        "email": user.email,
        "name": user.get_full_name() or user.get_username(),
        "isAdmin": bool(user.is_staff),
    }


def _set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        token,
        max_age=int(settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"].total_seconds()),
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="Strict",
        path="/",
    )


class LoginView(APIView):
    """POST /api/v1/auth/login/

    Verifies email + password and delivers the access token as the
    ``authToken`` HTTP-only cookie (the token is also in the body for
    non-browser clients).
    """

    authentication_classes: list = []
    permission_classes = [AllowAny]
    throttle_scope = "auth"

    def post(self, request: Request) -> Response:
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]

        user = get_user_model().objects.filter(email__iexact=email).first()
        if (
            user is None
            or not user.is_active
            or not user.check_password(serializer.validated_data["password"])
        ):
            logger.warning("auth.login_failed")
            return Response(
                {"message": INVALID_CREDENTIALS_MESSAGE},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        token = issue_access_token(user)
        response = Response(
            {"message": "Logged in.", "user": _user_payload(user), "access": token}
        )
        _set_auth_cookie(response, token)
        logger.info("auth.login_succeeded", user_id=user.pk)
        return response


class LogoutView(APIView):
    """POST /api/v1/auth/logout/: clears the auth cookie."""

    authentication_classes: list = []
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        response = Response({"message": "Logged out."})
        response.delete_cookie(settings.AUTH_COOKIE_NAME, path="/", samesite="Strict")
        return response


class MeView(APIView):
    """The authenticated caller's identity.

    * No token  -> 401
    * Bad token -> 401
    * Valid JWT (header or cookie) -> 200
    """

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        return Response(_user_payload(request.user))


class UserView(APIView):
    """POST (anyone) registers an account; PUT (caller) updates name and email.

    A profile update re-issues the ``authToken`` cookie so the token claims
    carry the new name and email.
    """

    throttle_scope = "auth"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = AccountService()

    def get_permissions(self):
        if self.request.method == "POST":
            return [AllowAny()]
        return [IsAuthenticated()]

    def post(self, request: Request) -> Response:
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            self._service.register(**serializer.validated_data)
        except EmailAlreadyRegistered as exc:
            return Response({"message": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(
            {"message": "User registration completed successfully."},
            status=status.HTTP_201_CREATED,
        )

    def put(self, request: Request) -> Response:
        serializer = ProfileSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            user = self._service.update_profile(request.user, **serializer.validated_data)
        except EmailAlreadyRegistered as exc:
            return Response({"message": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        response = Response(
            {"message": "Member information has been updated.", "user": _user_payload(user)}
        )
        _set_auth_cookie(response, issue_access_token(user))
        return response


class PasswordChangeView(APIView):
    """PUT /api/v1/users/password/"""

    permission_classes = [IsAuthenticated]
    throttle_scope = "auth"

    def put(self, request: Request) -> Response:
        serializer = PasswordChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            AccountService().change_password(
                request.user,
                old_password=serializer.validated_data["oldPassword"],
                new_password=serializer.validated_data["newPassword"],
            )
        except IncorrectPassword as exc:
            return Response({"message": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"message": "Password has been changed."})
