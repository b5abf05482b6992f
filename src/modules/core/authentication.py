"""JWT authentication backend for Django REST Framework.

Wraps SimpleJWT so that a token is accepted from either source:

* the ``Authorization: Bearer <token>`` header (API clients), or
* the ``authToken`` HTTP-only cookie set by the login endpoint (browser).

Security decisions
------------------
* **Fail Closed**: an invalid token in either place returns 401.
* The header always wins; the cookie is only consulted when no
  ``Authorization`` header was sent.
* The cookie is HTTP-only and ``SameSite=Strict``, so it is never readable
  from JavaScript and never sent on cross-site requests.
"""

from __future__ import annotations

import structlog
from django.conf import settings
from rest_framework.request import Request
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.tokens import AccessToken

logger = structlog.get_logger(__name__)


class CookieJWTAuthentication(JWTAuthentication):
    """DRF authentication class reading a JWT from header or cookie."""

    def authenticate(self, request: Request):
        """Return ``(user, validated_token)`` or ``None`` (no credentials)."""
        header = self.get_header(request)
        if header is not None:
            return super().authenticate(request)

        raw_token = request.COOKIES.get(settings.AUTH_COOKIE_NAME)
        if not raw_token:
            return None  # anonymous request

        validated_token = self.get_validated_token(raw_token.encode())
        user = self.get_user(validated_token)
        logger.debug("jwt_cookie_authenticated", user_id=user.pk)
        return user, validated_token


def issue_access_token(user) -> str:
    """Mint an access token carrying the claims the storefront reads."""
    token = AccessToken.for_user(user)
    token["email"] = user.email
    token["name"] = user.get_full_name() or user.get_username()
    token["is_admin"] = bool(user.is_staff)
    return str(token)
