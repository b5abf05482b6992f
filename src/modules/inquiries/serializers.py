from __future__ import annotations

from rest_framework import serializers

from modules.inquiries.models import Inquiry

REQUIRED_MESSAGE = "Please fill in all fields."


class InquirySerializer(serializers.ModelSerializer):
    class Meta:
        model = Inquiry
        fields = ["id", "name", "email", "message", "created_at"]
        read_only_fields = ["id", "created_at"]
        extra_kwargs = {
            field: {
                "error_messages": {
                    "required": REQUIRED_MESSAGE,
                    "blank": REQUIRED_MESSAGE,
                }
            }
            for field in ("name", "email", "message")
        }
