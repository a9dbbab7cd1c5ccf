from rest_framework import permissions
from rest_framework.response import Response


class IsCustomer(permissions.BasePermission):
    message = "Access denied. Customer account required."

    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        return request.user.is_customer


class IsProvider(permissions.BasePermission):
    message = "Access denied. Provider account required."

    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        return request.user.is_provider


class IsAdmin(permissions.BasePermission):
    message = "Access denied. Admin account required."

    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        return request.user.is_admin


class IsApprovedProvider(IsProvider):
    message = "Access denied. Your provider account is pending approval."

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        return request.user.provider.is_approved


def api_response(data=None, message=None, status_code=200, **extra):
    """Wrap a successful payload in the {success, statusCode, message, data} envelope."""
    body = {'success': True, 'statusCode': status_code}
    if message:
        body['message'] = message
    if data is not None:
        body['data'] = data
    body.update(extra)
    return Response(body, status=status_code)


def error_response(message, status_code=400, errors=None, **extra):
    body = {'success': False, 'statusCode': status_code, 'message': message}
    if errors:
        body['errors'] = errors
    body.update(extra)
    return Response(body, status=status_code)
