"""Shared fixtures: users for each role, authenticated API clients and upload helpers."""

import io
import itertools
from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone
from PIL import Image
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from apps.catalog.models import Service
from apps.users.models import Customer, Provider

User = get_user_model()

WEBHOOK_SECRET = "test-webhook-secret"
PASSWORD = "password123"


@pytest.fixture(autouse=True)
def _isolated_settings(settings, tmp_path):
    settings.EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
    settings.MEDIA_ROOT = str(tmp_path / "media")
    settings.CHAPA_WEBHOOK_SECRET = WEBHOOK_SECRET
    settings.CHAPA_SECRET_KEY = "CHASECK_TEST-key"
    settings.TWILIO_ACCOUNT_SID = ""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_user(db):
    """Factory creating a user plus the profile that matches its role."""
    counter = itertools.count(1)

    def _make(role="customer", approved=True, phone_number="0912345678", days_since_joined=0,
              skills=None, **fields):
        n = next(counter)
        email = fields.pop("email", f"{role}{n}@example.com")
        user = User.objects.create_user(
            username=email,
            email=email,
            password=PASSWORD,
            name=fields.pop("name", f"{role.title()} {n}"),
            phone_number=phone_number,
            role=role,
        )
        if role == "customer":
            Customer.objects.create(user=user, address="Bole, Addis Ababa")
        elif role == "provider":
            Provider.objects.create(
                user=user,
                address="Piassa, Addis Ababa",
                experience_years=3,
                skills=skills if skills is not None else ["Plumbing"],
                is_approved=approved,
                approved_at=timezone.now() if approved else None,
            )
        elif role == "admin":
            user.is_staff = True
        if days_since_joined:
            user.date_joined = timezone.now() - timedelta(days=days_since_joined)
        user.save()
        return user

    return _make


@pytest.fixture
def auth_client():
    """Return an APIClient authenticated with the user's token."""

    def _client(user):
        token, _ = Token.objects.get_or_create(user=user)
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")
        return client

    return _client


@pytest.fixture
def customer(make_user):
    return make_user("customer")


@pytest.fixture
def provider(make_user):
    return make_user("provider")


@pytest.fixture
def pending_provider(make_user):
    return make_user("provider", approved=False)


@pytest.fixture
def admin_account(make_user):
    return make_user("admin")


@pytest.fixture
def customer_api(auth_client, customer):
    return auth_client(customer)


@pytest.fixture
def provider_api(auth_client, provider):
    return auth_client(provider)


@pytest.fixture
def admin_api(auth_client, admin_account):
    return auth_client(admin_account)


@pytest.fixture
def service(db):
    return Service.objects.create(
        name="Plumbing",
        description="Pipe repair and installation",
        category="Home Repair",
        base_price="250.00",
        unit="hour",
    )


@pytest.fixture
def png_file():
    """Factory for a small in-memory PNG upload."""

    def _make(name="photo.png"):
        buffer = io.BytesIO()
        Image.new("RGB", (8, 8), color=(200, 120, 40)).save(buffer, format="PNG")
        return SimpleUploadedFile(name, buffer.getvalue(), content_type="image/png")

    return _make
