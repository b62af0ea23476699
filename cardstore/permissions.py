# cardstore/permissions.py
from functools import wraps

from django.conf import settings
from django.core.exceptions import PermissionDenied
from rest_framework.permissions import BasePermission

from .utilities import failure

ADMIN_REQUIRED_MESSAGE = "Admin privileges required"


class FrontendOnlyPermission(BasePermission):
    def has_permission(self, request, view):
        frontend_key = getattr(settings, "FRONTEND_KEY", "")
        if not frontend_key:
            return True
        return request.headers.get("X-Frontend-Key") == frontend_key


def require_admin(user):
    """Raise PermissionDenied unless ``user`` is an authenticated staff account."""
    if not (user is not None and user.is_authenticated and user.is_staff):
        raise PermissionDenied(ADMIN_REQUIRED_MESSAGE)
    return user


def admin_action(func):
    """
    Guard an action whose first argument is the acting user.
    A missing privilege becomes a failure envelope instead of an exception.
    """
    @wraps(func)
    def wrapper(user, *args, **kwargs):
        try:
            require_admin(user)
        except PermissionDenied:
            return failure(ADMIN_REQUIRED_MESSAGE)
        return func(user, *args, **kwargs)
    return wrapper
