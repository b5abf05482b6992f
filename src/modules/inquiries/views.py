"""Inquiry API: public submission, staff-only listing."""

from __future__ import annotations

import structlog
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.inquiries.models import Inquiry
from modules.inquiries.serializers import InquirySerializer

logger = structlog.get_logger(__name__)


class InquiryView(APIView):
    """GET (staff) / POST (anyone) /api/v1/inquiries/"""

    throttle_scope = "inquiries"

    def get_permissions(self):
        if self.request.method == "POST":
            return [AllowAny()]
        return [IsAdminUser()]

    def get(self, request: Request) -> Response:
        inquiries = Inquiry.objects.order_by("-created_at", "-id")
        return Response(InquirySerializer(inquiries, many=True).data)

    def post(self, request: Request) -> Response:
        serializer = InquirySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        inquiry = serializer.save()
        logger.info("inquiry.received", inquiry_id=inquiry.id)
        return Response({"message": "Your inquiry has been received."})
