from rest_framework import permissions


class RoleBasedPermission(permissions.BasePermission):
    """Allow the request when the user's role is in the view's ``required_roles``."""
    message = "Access denied. Insufficient permissions."

    def _has_role(self, user, view):
        required_roles = getattr(view, 'required_roles', None)
        if not required_roles:
            return True
        if 'admin' in required_roles and user.is_admin:
            return True
        if 'customer' in required_roles and user.is_customer:
            return True
        if 'provider' in required_roles and user.is_provider:
            return True
        return False

    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        return self._has_role(request.user, view)

    def has_object_permission(self, request, view, obj):
        return self._has_role(request.user, view)
