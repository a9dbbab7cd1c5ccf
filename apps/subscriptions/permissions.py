from rest_framework import permissions
from core.exceptions import SubscriptionRequired
from .utils import has_subscription_access, trial_expires_at


class HasSubscriptionOrTrial(permissions.BasePermission):
    """Admins always pass; everyone else needs the free trial or a paid, unexpired plan."""

    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        if has_subscription_access(request.user):
            return True
        raise SubscriptionRequired(trial_expires_at=trial_expires_at(request.user))
