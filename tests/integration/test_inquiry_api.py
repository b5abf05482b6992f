"""Integration tests for /api/v1/inquiries/."""

from __future__ import annotations

import pytest

from modules.inquiries.models import Inquiry

pytestmark = pytest.mark.integration

URL = "/api/v1/inquiries/"


class TestSubmitInquiry:
    def test_anyone_can_submit(self, api_client):
        response = api_client.post(
            URL,
            {"name": "Hanako", "email": "hanako@example.com", "message": "Gift wrap?"},
            format="json",
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Your inquiry has been received."}
        assert Inquiry.objects.filter(email="hanako@example.com").exists()

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"name": "", "email": "a@example.com", "message": "hi"},
            {"name": "A", "email": "a@example.com"},
        ],
    )
    def test_missing_fields(self, api_client, body):
        response = api_client.post(URL, body, format="json")
        assert response.status_code == 400
        assert response.json()["message"].endswith("Please fill in all fields.")
        assert Inquiry.objects.count() == 0

    def test_invalid_email(self, api_client):
        response = api_client.post(
            URL, {"name": "A", "email": "nope", "message": "hi"}, format="json"
        )
        assert response.status_code == 400
        assert response.json()["message"].startswith("email: ")


class TestListInquiries:
    def test_anonymous_gets_401(self, api_client):
        assert api_client.get(URL).status_code == 401

    def test_buyer_gets_403(self, auth_client):
        assert auth_client.get(URL).status_code == 403

    def test_staff_sees_newest_first(self, staff_client):
        Inquiry.objects.create(name="A", email="a@example.com", message="first")
        Inquiry.objects.create(name="B", email="b@example.com", message="second")
        response = staff_client.get(URL)
        assert response.status_code == 200
        assert [i["message"] for i in response.json()] == ["second", "first"]
