"""Account use cases: registration, profile update and password change.

Accounts are Django's own user model.  Email addresses are unique
case-insensitively; the email doubles as the username of self-registered
accounts because login is by email.
"""

from __future__ import annotations

import structlog
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from modules.core.exceptions import EmailAlreadyRegistered, IncorrectPassword

logger = structlog.get_logger(__name__)


class AccountService:
    def __init__(self) -> None:
        self._users = get_user_model()

    def _email_taken(self, email: str, exclude_id: int | None = None) -> bool:
        users = self._users.objects.filter(email__iexact=email)
        if exclude_id is not None:
            users = users.exclude(pk=exclude_id)
        return users.exists()

    def register(self, name: str, email: str, password: str):
        """Create a regular, active account.

        Raises:
            EmailAlreadyRegistered: the email (or username) is in use.
        """
        if self._email_taken(email):
            raise EmailAlreadyRegistered("This email address is already registered.")

        try:
            with transaction.atomic():
                user = self._users.objects.create_user(
                    username=email,
                    email=email,
                    password=password,
                    first_name=name,
                )
        except IntegrityError as exc:
            raise EmailAlreadyRegistered(
                "This email address is already registered."
            ) from exc

        logger.info("account.registered", user_id=user.pk)
        return user

    def update_profile(self, user, name: str, email: str):
        """Change the display name and email of ``user``."""
        if self._email_taken(email, exclude_id=user.pk):
            raise EmailAlreadyRegistered("This email address is already in use.")

        user.first_name = name
        user.email = email
        user.save(update_fields=["first_name", "email"])
        logger.info("account.profile_updated", user_id=user.pk)
        return user

    def change_password(self, user, old_password: str, new_password: str) -> None:
        if not user.check_password(old_password):
            logger.warning("account.password_change_rejected", user_id=user.pk)
            raise IncorrectPassword("Current password is incorrect.")

        user.set_password(new_password)
        user.save(update_fields=["password"])
        logger.info("account.password_changed", user_id=user.pk)
