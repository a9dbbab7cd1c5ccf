import hashlib
import hmac
import logging
import re
import uuid
from datetime import timedelta
import requests
from django.conf import settings
from django.utils import timezone
from .models import Subscription

logger = logging.getLogger(__name__)


def trial_expires_at(user):
    return user.date_joined + timedelta(days=settings.TRIAL_PERIOD_DAYS)


def is_trial_active(user):
    return timezone.now() < trial_expires_at(user)


def get_active_subscription(user):
    return Subscription.objects.filter(
        user=user,
        status='Active',
        payment_status='paid',
        end_date__gt=timezone.now()
    ).order_by('-end_date').first()


def has_subscription_access(user):
    if user.is_admin:
        return True
    if is_trial_active(user):
        return True
    return get_active_subscription(user) is not None


def subscription_summary_status(user):
    """'Active' for a current paid plan, 'Trial' inside the trial window, otherwise 'Expired'."""
    subscription = user.current_subscription
    if subscription and subscription.is_current:
        return 'Active'
    if is_trial_active(user):
        return 'Trial'
    return 'Expired'


def initialize_payment(subscription, user):
    """
    Start a Chapa checkout for a subscription.
    Returns (checkout_url, tx_ref) or raises ValueError when Chapa refuses the request.
    """
    tx_ref = f"sub-{subscription.id}-user-{user.id}-{uuid.uuid4().hex[:6]}"
    first_name, _, last_name = (user.name or '').partition(' ')
    description = re.sub(r'[^a-zA-Z0-9\-_\s.]', '', f"{subscription.plan_name} plan subscription")[:100]
    payload = {
        'amount': str(subscription.amount),
        'currency': settings.PAYMENT_CURRENCY,
        'email': user.email,
        'first_name': first_name,
        'last_name': last_name,
        'phone_number': user.phone_number or '',
        'tx_ref': tx_ref,
        'callback_url': settings.CHAPA_CALLBACK_URL,
        'return_url': f"{settings.CLIENT_URL}/subscription/success?tx_ref={tx_ref}",
        'customization': {
            'title': 'WorkBond Plan'[:16],
            'description': description
        },
        'meta': {
            'type': 'subscription_payment',
            'subscription_id': subscription.id,
            'user_id': user.id,
        }
    }
    headers = {
        'Authorization': f'Bearer {settings.CHAPA_SECRET_KEY.strip()}',
        'Content-Type': 'application/json'
    }
    try:
        logger.info(f"Initializing Chapa checkout {tx_ref} for subscription {subscription.id}")
        response = requests.post(
            f"{settings.CHAPA_BASE_URL}/transaction/initialize",
            json=payload,
            headers=headers,
            timeout=10
        )
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.HTTPError as e:
        logger.error(f"Chapa HTTP error: {str(e)}, Response: {e.response.text if e.response is not None else ''}")
        raise ValueError("Invalid payment request")
    except requests.exceptions.RequestException as e:
        logger.error(f"Chapa request failed: {str(e)}")
        raise

    if data.get('status') != 'success':
        logger.error(f"Chapa initialization failed: {data}")
        raise ValueError(f"Chapa initialization failed: {data.get('message', 'Unknown error')}")
    return data['data']['checkout_url'], tx_ref


def verify_payment(tx_ref):
    """Ask Chapa for the final state of a transaction."""
    headers = {
        'Authorization': f'Bearer {settings.CHAPA_SECRET_KEY.strip()}'
    }
    try:
        response = requests.get(
            f'{settings.CHAPA_BASE_URL}/transaction/verify/{tx_ref}',
            headers=headers,
            timeout=10
        )
        response.raise_for_status()
        return response.json()
    except requests.RequestException as e:
        logger.error(f'Chapa verification failed for {tx_ref}: {str(e)}')
        raise


def verify_webhook_signature(body, signature):
    if not settings.CHAPA_WEBHOOK_SECRET or not signature:
        return False
    secret = settings.CHAPA_WEBHOOK_SECRET.encode('utf-8')
    computed_signature = hmac.new(secret, body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(computed_signature, signature)
