from django.urls import path

from modules.inquiries.views import InquiryView

urlpatterns = [
    path("inquiries/", InquiryView.as_view(), name="inquiry-list"),
]
