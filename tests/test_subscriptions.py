"""Tests for the trial window, subscriptions and the Chapa payment flow."""

import hashlib
import hmac
import json
from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
import requests
from django.core import mail
from django.utils import timezone

from apps.notifications.models import Notification
from apps.subscriptions.models import Subscription
from apps.subscriptions.utils import (
    has_subscription_access,
    initialize_payment,
    is_trial_active,
    verify_webhook_signature,
)

WEBHOOK_SECRET = "test-webhook-secret"

pytestmark = pytest.mark.django_db


def _in_days(days):
    return timezone.now() + timedelta(days=days)


def _subscription(user, **fields):
    defaults = {
        "user_type": "Provider" if user.role == "provider" else "Customer",
        "plan_name": "Standard",
        "end_date": _in_days(30),
        "amount": Decimal("500.00"),
        "status": "Active",
        "payment_status": "pending",
    }
    defaults.update(fields)
    return Subscription.objects.create(user=user, **defaults)


def _post_webhook(client, payload, signature=None):
    body = json.dumps(payload).encode()
    if signature is None:
        signature = hmac.new(WEBHOOK_SECRET.encode(), body, hashlib.sha256).hexdigest()
    return client.post(
        "/api/payments/webhook/",
        data=body,
        content_type="application/json",
        HTTP_CHAPA_SIGNATURE=signature,
    )


class TestTrialWindow:

    def test_new_user_is_on_trial(self, customer):
        assert is_trial_active(customer) is True
        assert has_subscription_access(customer) is True

    def test_trial_ends_after_thirty_days(self, make_user):
        user = make_user("customer", days_since_joined=31)
        assert is_trial_active(user) is False
        assert has_subscription_access(user) is False

    def test_trial_length_follows_setting(self, make_user, settings):
        settings.TRIAL_PERIOD_DAYS = 60
        user = make_user("customer", days_since_joined=45)
        assert is_trial_active(user) is True

    def test_admin_always_has_access(self, make_user):
        assert has_subscription_access(make_user("admin", days_since_joined=400)) is True

    def test_paid_subscription_grants_access(self, make_user):
        user = make_user("provider", days_since_joined=40)
        _subscription(user, payment_status="paid")
        assert has_subscription_access(user) is True

    def test_unpaid_or_expired_subscription_does_not(self, make_user):
        user = make_user("provider", days_since_joined=40)
        _subscription(user, payment_status="pending")
        _subscription(user, payment_status="paid", end_date=timezone.now() - timedelta(days=1))
        assert has_subscription_access(user) is False

    def test_expired_provider_is_blocked(self, make_user, auth_client):
        user = make_user("provider", days_since_joined=40)
        response = auth_client(user).get("/api/providers/bookings/")
        assert response.status_code == 403
        body = response.json()
        assert body["success"] is False
        assert body["requiresSubscription"] is True
        assert body["trialExpired"] is True
        assert body["message"] == (
            "Access denied. An active subscription is required after the 1-month free trial."
        )
        assert "trialExpiresAt" in body

    def test_expired_provider_with_plan_passes(self, make_user, auth_client):
        user = make_user("provider", days_since_joined=40)
        _subscription(user, payment_status="paid")
        assert auth_client(user).get("/api/providers/bookings/").status_code == 200


class TestSubscriptionModel:

    def test_active_with_past_end_date_is_stored_expired(self, customer):
        subscription = _subscription(customer, end_date=timezone.now() - timedelta(hours=1))
        subscription.refresh_from_db()
        assert subscription.status == "Expired"

    def test_mark_as_paid_sets_current_subscription(self, customer):
        subscription = _subscription(customer)
        subscription.mark_as_paid(gateway_reference="APx123")
        customer.refresh_from_db()
        assert subscription.payment_status == "paid"
        assert subscription.paid_at is not None
        assert subscription.gateway_reference == "APx123"
        assert customer.current_subscription_id == subscription.id


class TestSubscribe:

    def test_free_plan_is_activated(self, provider_api, provider):
        response = provider_api.post(
            "/api/subscriptions/subscribe/",
            {"plan_name": "Free", "end_date": _in_days(30).isoformat(), "amount": "0"},
            format="json",
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["payment_status"] == "paid"
        assert data["user_type"] == "Provider"
        provider.refresh_from_db()
        assert provider.current_subscription_id == data["id"]

    def test_paid_plan_waits_for_payment(self, customer_api, customer):
        response = customer_api.post(
            "/api/subscriptions/subscribe/",
            {"plan_name": "Premium", "end_date": _in_days(30).isoformat(), "amount": "199.00"},
            format="json",
        )
        assert response.status_code == 201
        body = response.json()
        assert body["data"]["payment_status"] == "pending"
        assert body["message"] == "Subscription created successfully. Please complete payment to activate."
        customer.refresh_from_db()
        assert customer.current_subscription_id is None

    def test_end_date_must_follow_start(self, customer_api):
        response = customer_api.post(
            "/api/subscriptions/subscribe/",
            {"plan_name": "Standard", "end_date": _in_days(-1).isoformat(), "amount": "10"},
            format="json",
        )
        assert response.status_code == 400
        assert "end_date" in response.json()["errors"]

    def test_admin_cannot_self_subscribe(self, admin_api):
        response = admin_api.post(
            "/api/subscriptions/subscribe/",
            {"plan_name": "Standard", "end_date": _in_days(30).isoformat(), "amount": "10"},
            format="json",
        )
        assert response.status_code == 400


class TestSubscriptionAdmin:

    def test_admin_creates_for_user(self, admin_api, customer):
        response = admin_api.post(
            "/api/subscriptions/",
            {"user": customer.id, "plan_name": "Business", "end_date": _in_days(90).isoformat(), "amount": "0"},
            format="json",
        )
        assert response.status_code == 201
        assert response.json()["data"]["user_type"] == "Customer"
        customer.refresh_from_db()
        assert customer.current_subscription is not None

    def test_user_type_must_match(self, admin_api, customer):
        response = admin_api.post(
            "/api/subscriptions/",
            {
                "user": customer.id,
                "user_type": "Provider",
                "plan_name": "Business",
                "end_date": _in_days(90).isoformat(),
                "amount": "10",
            },
            format="json",
        )
        assert response.status_code == 400
        assert "user_type" in response.json()["errors"]

    def test_only_admin_creates(self, customer_api, customer):
        response = customer_api.post(
            "/api/subscriptions/",
            {"user": customer.id, "plan_name": "Business", "end_date": _in_days(90).isoformat(), "amount": "0"},
            format="json",
        )
        assert response.status_code == 403

    def test_list_scoped_to_owner(self, customer_api, customer, make_user):
        own = _subscription(customer)
        _subscription(make_user("customer"))
        response = customer_api.get("/api/subscriptions/")
        assert [s["id"] for s in response.json()["data"]] == [own.id]

    def test_admin_lists_everything(self, admin_api, customer, provider):
        _subscription(customer)
        _subscription(provider)
        assert admin_api.get("/api/subscriptions/").json()["pagination"]["total"] == 2

    def test_detail_of_someone_else_is_forbidden(self, customer_api, make_user):
        other = _subscription(make_user("customer"))
        assert customer_api.get(f"/api/subscriptions/{other.id}/").status_code == 403

    def test_invalid_status_update(self, admin_api, customer):
        subscription = _subscription(customer)
        response = admin_api.put(f"/api/subscriptions/{subscription.id}/", {"status": "Paused"}, format="json")
        assert response.status_code == 400
        assert response.json()["errors"]["status"] == ["Invalid status. Must be Active, Cancelled, or Expired"]

    def test_cancelling_clears_current_subscription(self, admin_api, customer):
        subscription = _subscription(customer, payment_status="paid")
        customer.current_subscription = subscription
        customer.save()
        response = admin_api.put(f"/api/subscriptions/{subscription.id}/", {"status": "Cancelled"}, format="json")
        assert response.status_code == 200
        customer.refresh_from_db()
        assert customer.current_subscription_id is None

    def test_delete(self, admin_api, customer):
        subscription = _subscription(customer)
        assert admin_api.delete(f"/api/subscriptions/{subscription.id}/").status_code == 200
        assert not Subscription.objects.filter(pk=subscription.id).exists()

    def test_summary_labels(self, admin_api, make_user):
        trial_user = make_user("provider")
        expired_user = make_user("customer", days_since_joined=60)
        paying_user = make_user("customer", days_since_joined=60)
        subscription = _subscription(paying_user, payment_status="paid")
        paying_user.current_subscription = subscription
        paying_user.save()

        response = admin_api.get("/api/subscriptions/admin-summary/")
        assert response.status_code == 200
        labels = {row["id"]: row["status"] for row in response.json()["data"]}
        assert labels == {trial_user.id: "Trial", expired_user.id: "Expired", paying_user.id: "Active"}


class TestSubscriptionStatus:

    def test_user_subscription_overview(self, customer_api, customer):
        pending = _subscription(customer)
        response = customer_api.get("/api/payments/user-subscription/")
        data = response.json()["data"]
        assert data["isTrialActive"] is True
        assert data["activeSubscription"] is None
        assert data["pendingSubscription"]["id"] == pending.id
        assert len(data["allSubscriptions"]) == 1

    def test_provider_subscription_missing(self, provider_api):
        assert provider_api.get("/api/providers/subscription/").status_code == 404

    def test_provider_subscription_latest(self, provider_api, provider):
        older = _subscription(provider, plan_name="Standard")
        Subscription.objects.filter(pk=older.pk).update(created_at=timezone.now() - timedelta(days=2))
        latest = _subscription(provider, plan_name="Premium")
        response = provider_api.get("/api/providers/subscription/")
        assert response.json()["data"]["id"] == latest.id


class TestInitializePayment:

    def test_posts_checkout_request(self, customer):
        subscription = _subscription(customer)
        gateway_response = MagicMock()
        gateway_response.json.return_value = {
            "status": "success",
            "data": {"checkout_url": "https://checkout.chapa.co/checkout/payment/abc"},
        }
        with patch("apps.subscriptions.utils.requests.post", return_value=gateway_response) as post:
            checkout_url, tx_ref = initialize_payment(subscription, customer)

        assert checkout_url == "https://checkout.chapa.co/checkout/payment/abc"
        assert tx_ref.startswith(f"sub-{subscription.id}-user-{customer.id}-")
        payload = post.call_args.kwargs["json"]
        assert payload["amount"] == "500.00"
        assert payload["tx_ref"] == tx_ref
        assert payload["meta"]["subscription_id"] == subscription.id
        assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer CHASECK_TEST-key"

    def test_refused_checkout_raises_value_error(self, customer):
        subscription = _subscription(customer)
        gateway_response = MagicMock()
        gateway_response.json.return_value = {"status": "failed", "message": "Invalid currency"}
        with patch("apps.subscriptions.utils.requests.post", return_value=gateway_response):
            with pytest.raises(ValueError, match="Invalid currency"):
                initialize_payment(subscription, customer)


class TestSubscriptionPayment:

    def test_starts_checkout(self, customer_api, customer):
        subscription = _subscription(customer)
        with patch(
            "apps.subscriptions.views.initialize_payment",
            return_value=("https://checkout.chapa.co/pay/xyz", "sub-tx-xyz"),
        ):
            response = customer_api.post(
                "/api/payments/subscription-payment/", {"subscription_id": subscription.id}, format="json"
            )
        assert response.status_code == 200
        assert response.json()["data"]["checkout_url"] == "https://checkout.chapa.co/pay/xyz"
        subscription.refresh_from_db()
        assert subscription.tx_ref == "sub-tx-xyz"
        assert subscription.checkout_url == "https://checkout.chapa.co/pay/xyz"

    def test_someone_elses_subscription(self, customer_api, make_user):
        other = _subscription(make_user("customer"))
        response = customer_api.post(
            "/api/payments/subscription-payment/", {"subscription_id": other.id}, format="json"
        )
        assert response.status_code == 403

    def test_already_paid(self, customer_api, customer):
        subscription = _subscription(customer, payment_status="paid")
        response = customer_api.post(
            "/api/payments/subscription-payment/", {"subscription_id": subscription.id}, format="json"
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Subscription is already paid"

    def test_missing_subscription(self, customer_api):
        response = customer_api.post("/api/payments/subscription-payment/", {"subscription_id": 999}, format="json")
        assert response.status_code == 404

    def test_gateway_down(self, customer_api, customer):
        subscription = _subscription(customer)
        with patch(
            "apps.subscriptions.views.initialize_payment",
            side_effect=requests.ConnectionError("boom"),
        ):
            response = customer_api.post(
                "/api/payments/subscription-payment/", {"subscription_id": subscription.id}, format="json"
            )
        assert response.status_code == 502


class TestWebhookSignature:

    def test_valid_signature(self):
        body = b'{"tx_ref": "abc"}'
        signature = hmac.new(WEBHOOK_SECRET.encode(), body, hashlib.sha256).hexdigest()
        assert verify_webhook_signature(body, signature) is True

    def test_invalid_or_missing_signature(self):
        assert verify_webhook_signature(b"{}", "deadbeef") is False
        assert verify_webhook_signature(b"{}", None) is False

    def test_missing_secret_rejects_everything(self, settings):
        settings.CHAPA_WEBHOOK_SECRET = ""
        body = b"{}"
        signature = hmac.new(b"", body, hashlib.sha256).hexdigest()
        assert verify_webhook_signature(body, signature) is False


class TestPaymentWebhook:

    def test_bad_signature(self, api_client, customer):
        _subscription(customer, tx_ref="sub-tx-1")
        response = _post_webhook(api_client, {"tx_ref": "sub-tx-1", "status": "success"}, signature="bad")
        assert response.status_code == 400
        assert Subscription.objects.get(tx_ref="sub-tx-1").payment_status == "pending"

    def test_unknown_tx_ref(self, api_client):
        response = _post_webhook(api_client, {"tx_ref": "missing", "status": "success"})
        assert response.status_code == 404

    @pytest.mark.parametrize("count", [1, 2])
    def test_missing_tx_ref_touches_nothing(self, api_client, customer, count):
        for _ in range(count):
            _subscription(customer)
        response = _post_webhook(api_client, {"status": "failed"})
        assert response.status_code == 400
        assert not Subscription.objects.filter(payment_status="failed").exists()
        assert not Notification.objects.filter(recipient=customer).exists()

    def test_successful_payment_activates_subscription(self, api_client, customer):
        subscription = _subscription(customer, tx_ref="sub-tx-1")
        verification = {"status": "success", "data": {"status": "success", "reference": "APref42"}}
        with patch("apps.subscriptions.views.verify_payment", return_value=verification) as verify:
            response = _post_webhook(
                api_client, {"tx_ref": "sub-tx-1", "status": "success", "currency": "ETB"}
            )

        assert response.status_code == 200
        assert response.json() == {"received": True}
        verify.assert_called_once_with("sub-tx-1")
        subscription.refresh_from_db()
        customer.refresh_from_db()
        assert subscription.payment_status == "paid"
        assert subscription.status == "Active"
        assert subscription.paid_at is not None
        assert subscription.gateway_reference == "APref42"
        assert customer.current_subscription_id == subscription.id
        assert Notification.objects.filter(recipient=customer, type="success").exists()
        assert len(mail.outbox) == 1

    def test_failed_charge(self, api_client, customer):
        subscription = _subscription(customer, tx_ref="sub-tx-1")
        with patch("apps.subscriptions.views.verify_payment") as verify:
            response = _post_webhook(api_client, {"tx_ref": "sub-tx-1", "status": "failed"})
        assert response.status_code == 200
        verify.assert_not_called()
        subscription.refresh_from_db()
        assert subscription.payment_status == "failed"
        assert Notification.objects.filter(recipient=customer, type="error").exists()

    def test_verification_mismatch(self, api_client, customer):
        subscription = _subscription(customer, tx_ref="sub-tx-1")
        verification = {"status": "success", "data": {"status": "failed"}}
        with patch("apps.subscriptions.views.verify_payment", return_value=verification):
            response = _post_webhook(api_client, {"tx_ref": "sub-tx-1", "status": "success"})
        assert response.status_code == 400
        subscription.refresh_from_db()
        assert subscription.payment_status == "failed"

    def test_already_paid_is_acknowledged(self, api_client, customer):
        _subscription(customer, tx_ref="sub-tx-1", payment_status="paid")
        with patch("apps.subscriptions.views.verify_payment") as verify:
            response = _post_webhook(api_client, {"tx_ref": "sub-tx-1", "status": "success"})
        assert response.status_code == 200
        verify.assert_not_called()
