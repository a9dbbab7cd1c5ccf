"""Tests for registration, login, profiles and public provider listings."""

import pytest
from django.contrib.auth import get_user_model
from rest_framework.authtoken.models import Token

from apps.users.models import Customer, Provider

PASSWORD = "password123"

User = get_user_model()

pytestmark = pytest.mark.django_db


def _login(client, email, role, password=PASSWORD):
    return client.post(
        "/api/auth/login/",
        {"email": email, "password": password, "role": role},
        format="json",
    )


class TestRegistration:

    def test_register_customer_returns_token(self, api_client):
        response = api_client.post(
            "/api/auth/register/customer/",
            {
                "name": "Abebe Kebede",
                "email": "Abebe@Example.com",
                "password": "strongpass1",
                "phone_number": "0911223344",
                "address": "Bole",
            },
            format="json",
        )
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["token"]
        assert body["data"]["user"]["role"] == "customer"
        user = User.objects.get(email="abebe@example.com")
        assert Customer.objects.filter(user=user, address="Bole").exists()

    def test_customer_needs_phone_and_address(self, api_client):
        response = api_client.post(
            "/api/auth/register/customer/",
            {"name": "Someone", "email": "nophone@example.com", "password": "strongpass1"},
            format="json",
        )
        assert response.status_code == 400
        errors = response.json()["errors"]
        assert "phone_number" in errors
        assert "address" in errors
        assert not User.objects.filter(email="nophone@example.com").exists()

    def test_duplicate_email_rejected(self, api_client, customer):
        response = api_client.post(
            "/api/auth/register/customer/",
            {"name": "Someone", "email": customer.email.upper(), "password": "strongpass1"},
            format="json",
        )
        assert response.status_code == 400
        assert response.json()["success"] is False
        assert "email" in response.json()["errors"]

    def test_short_password_rejected(self, api_client):
        response = api_client.post(
            "/api/auth/register/customer/",
            {"name": "Someone", "email": "short@example.com", "password": "short"},
            format="json",
        )
        assert response.status_code == 400
        assert response.json()["errors"]["password"] == ["Password must be at least 8 characters long."]

    def test_register_provider_is_pending_without_token(self, api_client):
        response = api_client.post(
            "/api/auth/register/provider/",
            {
                "name": "Tigist Alemu",
                "email": "tigist@example.com",
                "password": "strongpass1",
                "phone_number": "0911223344",
                "address": "Kazanchis",
                "experience_years": 4,
                "skills": ["Electrical", "Wiring"],
            },
            format="json",
        )
        assert response.status_code == 201
        body = response.json()
        assert body["data"]["isApproved"] is False
        assert "token" not in body["data"]
        provider = Provider.objects.get(user__email="tigist@example.com")
        assert provider.is_approved is False
        assert provider.skills == ["Electrical", "Wiring"]

    def test_provider_phone_must_have_ten_digits(self, api_client):
        response = api_client.post(
            "/api/auth/register/provider/",
            {
                "name": "Tigist Alemu",
                "email": "tigist@example.com",
                "password": "strongpass1",
                "phone_number": "12345",
                "address": "Kazanchis",
                "experience_years": 4,
                "skills": ["Electrical"],
            },
            format="json",
        )
        assert response.status_code == 400
        assert "phone_number" in response.json()["errors"]

    def test_provider_needs_at_least_one_skill(self, api_client):
        response = api_client.post(
            "/api/auth/register/provider/",
            {
                "name": "Tigist Alemu",
                "email": "tigist@example.com",
                "password": "strongpass1",
                "phone_number": "0911223344",
                "address": "Kazanchis",
                "experience_years": 4,
                "skills": [],
            },
            format="json",
        )
        assert response.status_code == 400
        assert "skills" in response.json()["errors"]


class TestAdminRegistration:

    def test_first_admin_can_bootstrap(self, api_client):
        response = api_client.post(
            "/api/auth/register/admin/",
            {"name": "Root Admin", "email": "root@example.com", "password": "strongpass1"},
            format="json",
        )
        assert response.status_code == 201
        assert User.objects.get(email="root@example.com").is_staff is True

    def test_second_admin_needs_an_admin(self, api_client, admin_account):
        response = api_client.post(
            "/api/auth/register/admin/",
            {"name": "Another", "email": "another@example.com", "password": "strongpass1"},
            format="json",
        )
        assert response.status_code == 403
        assert not User.objects.filter(email="another@example.com").exists()

    def test_admin_can_register_admin(self, admin_api):
        response = admin_api.post(
            "/api/auth/register/admin/",
            {"name": "Another", "email": "another@example.com", "password": "strongpass1"},
            format="json",
        )
        assert response.status_code == 201


class TestLogin:

    def test_customer_login(self, api_client, customer):
        response = _login(api_client, customer.email, "customer")
        assert response.status_code == 200
        body = response.json()
        assert body["data"]["token"] == Token.objects.get(user=customer).key
        customer.refresh_from_db()
        assert customer.last_login is not None

    def test_wrong_password(self, api_client, customer):
        response = _login(api_client, customer.email, "customer", password="wrong-password")
        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "statusCode": 401,
            "message": "Invalid email or password.",
        }

    def test_role_mismatch_is_rejected(self, api_client, customer):
        response = _login(api_client, customer.email, "provider")
        assert response.status_code == 401

    def test_pending_provider_is_blocked_after_password_check(self, api_client, pending_provider):
        response = _login(api_client, pending_provider.email, "provider")
        assert response.status_code == 403
        assert response.json()["isApproved"] is False

        response = _login(api_client, pending_provider.email, "provider", password="wrong-password")
        assert response.status_code == 401

    def test_approved_provider_login(self, api_client, provider):
        response = _login(api_client, provider.email, "provider")
        assert response.status_code == 200
        assert response.json()["data"]["user"]["role"] == "provider"

    def test_lockout_after_five_failures(self, api_client, customer):
        for _ in range(5):
            assert _login(api_client, customer.email, "customer", password="nope-nope").status_code == 401
        response = _login(api_client, customer.email, "customer")
        assert response.status_code == 429
        assert response.json()["success"] is False

    def test_success_resets_failures(self, api_client, customer):
        for _ in range(4):
            _login(api_client, customer.email, "customer", password="nope-nope")
        assert _login(api_client, customer.email, "customer").status_code == 200
        for _ in range(4):
            _login(api_client, customer.email, "customer", password="nope-nope")
        assert _login(api_client, customer.email, "customer").status_code == 200

    def test_logout_deletes_token(self, customer_api, customer):
        response = customer_api.post("/api/auth/logout/")
        assert response.status_code == 200
        assert not Token.objects.filter(user=customer).exists()


class TestProfiles:

    def test_customer_profile_update(self, customer_api, customer):
        response = customer_api.put(
            "/api/customers/profile/",
            {"name": "New Name", "address": "Megenagna"},
            format="json",
        )
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "New Name"
        customer.refresh_from_db()
        assert customer.name == "New Name"
        assert customer.customer.address == "Megenagna"

    def test_customer_profile_requires_customer(self, provider_api):
        response = provider_api.get("/api/customers/profile/")
        assert response.status_code == 403
        assert response.json()["message"] == "Access denied. Customer account required."

    def test_provider_profile_update(self, provider_api, provider):
        response = provider_api.put(
            "/api/providers/profile/",
            {"skills": ["Plumbing", "Tiling"], "availability_status": "Unavailable"},
            format="json",
        )
        assert response.status_code == 200
        provider.provider.refresh_from_db()
        assert provider.provider.skills == ["Plumbing", "Tiling"]
        assert provider.provider.availability_status == "Unavailable"

    def test_pending_provider_cannot_use_profile(self, auth_client, pending_provider):
        response = auth_client(pending_provider).get("/api/providers/profile/")
        assert response.status_code == 403
        assert response.json()["message"] == "Access denied. Your provider account is pending approval."

    def test_profile_image_upload_and_delete(self, provider_api, provider, png_file):
        response = provider_api.patch(
            "/api/providers/profile/image/",
            {"profile_image": png_file()},
            format="multipart",
        )
        assert response.status_code == 200
        assert response.json()["data"]["profile_image"]

        response = provider_api.delete("/api/providers/profile/image/")
        assert response.status_code == 200
        provider.provider.refresh_from_db()
        assert not provider.provider.profile_image

        assert provider_api.delete("/api/providers/profile/image/").status_code == 404


class TestApprovalStatus:

    def test_pending_provider_checks_own_status(self, auth_client, pending_provider):
        response = auth_client(pending_provider).get("/api/providers/check-approval/")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["approval_status"] == "Pending"
        assert data["is_approved"] is False

    def test_public_status_lookup(self, api_client, provider):
        response = api_client.get(f"/api/providers/check-approval/{provider.id}/")
        assert response.status_code == 200
        assert response.json()["data"]["approval_status"] == "Approved"

    def test_public_status_unknown_provider(self, api_client):
        assert api_client.get("/api/providers/check-approval/999/").status_code == 404


class TestPublicProviders:

    def test_only_approved_providers_are_listed(self, api_client, make_user):
        approved = make_user("provider", name="Approved Plumber")
        make_user("provider", approved=False, name="Pending Plumber")
        response = api_client.get("/api/providers/public/")
        assert response.status_code == 200
        body = response.json()
        assert [p["id"] for p in body["data"]] == [approved.id]
        assert body["pagination"]["total"] == 1

    def test_is_approved_cannot_be_overridden(self, api_client, make_user):
        make_user("provider", approved=False)
        response = api_client.get("/api/providers/public/?isApproved=false")
        assert response.json()["pagination"]["total"] == 0

    def test_search_and_rating_sort(self, api_client, make_user):
        first = make_user("provider", name="Selam Electric")
        second = make_user("provider", name="Selam Plumbing")
        make_user("provider", name="Other")
        Provider.objects.filter(user=first).update(rating=3.5)
        Provider.objects.filter(user=second).update(rating=4.8)
        response = api_client.get("/api/providers/public/?q=selam")
        assert [p["id"] for p in response.json()["data"]] == [second.id, first.id]

    def test_detail_hides_pending_provider(self, api_client, pending_provider, provider):
        assert api_client.get(f"/api/providers/public/{pending_provider.id}/").status_code == 404
        assert api_client.get(f"/api/providers/public/{provider.id}/").status_code == 200
