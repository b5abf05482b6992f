from __future__ import annotations

from rest_framework import serializers

REQUIRED_MESSAGE = "Please fill in all fields."
INVALID_EMAIL_MESSAGE = "Please enter a valid email address format."
MIN_PASSWORD_LENGTH = 8

_REQUIRED = {"required": REQUIRED_MESSAGE, "blank": REQUIRED_MESSAGE, "null": REQUIRED_MESSAGE}


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(trim_whitespace=False)


class ProfileSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150, error_messages=_REQUIRED)
    email = serializers.EmailField(
        max_length=150, error_messages={**_REQUIRED, "invalid": INVALID_EMAIL_MESSAGE}
    )


class RegisterSerializer(ProfileSerializer):
    password = serializers.CharField(
        trim_whitespace=False,
        min_length=MIN_PASSWORD_LENGTH,
        error_messages={
            **_REQUIRED,
            "min_length": "Password must be at least 8 characters long.",
        },
    )


class PasswordChangeSerializer(serializers.Serializer):
    oldPassword = serializers.CharField(trim_whitespace=False, error_messages=_REQUIRED)
    newPassword = serializers.CharField(
        trim_whitespace=False,
        min_length=MIN_PASSWORD_LENGTH,
        error_messages={
            **_REQUIRED,
            "min_length": "Please enter a password of 8 characters or more.",
        },
    )
