import logging
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class SubscriptionRequired(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied. An active subscription is required after the 1-month free trial."
    default_code = 'subscription_required'

    def __init__(self, trial_expires_at=None, detail=None):
        super().__init__(detail=detail)
        self.trial_expires_at = trial_expires_at


def _first_message(detail):
    if isinstance(detail, list) and detail:
        return _first_message(detail[0])
    if isinstance(detail, dict) and detail:
        return _first_message(next(iter(detail.values())))
    return str(detail)


def envelope_exception_handler(exc, context):
    """Render DRF exceptions as {success: false, statusCode, message, errors}."""
    response = exception_handler(exc, context)
    if response is None:
        return None

    detail = response.data
    body = {'success': False, 'statusCode': response.status_code}
    if isinstance(detail, dict) and set(detail) == {'detail'}:
        body['message'] = str(detail['detail'])
    else:
        body['message'] = _first_message(detail) or 'Validation failed'
        body['errors'] = detail

    if isinstance(exc, SubscriptionRequired):
        body['requiresSubscription'] = True
        body['trialExpired'] = True
        if exc.trial_expires_at:
            body['trialExpiresAt'] = exc.trial_expires_at.isoformat()
        logger.warning(f"Subscription gate blocked {context['request'].user}")

    response.data = body
    return response
