"""
Role based access control.

Roles are a tag on the user, checked per operation.  Views declare the
DRF permission classes below; services that mutate state call
:func:`require_admin` themselves so the check holds no matter which
entry point (view, management command, shell) invoked them.
"""
from rest_framework.permissions import BasePermission

from .exceptions import Forbidden


def is_admin(user) -> bool:
    return bool(user and getattr(user, 'is_authenticated', False) and getattr(user, 'role', None) == 'ADMIN')


def require_admin(user) -> None:
    """Raise ``Forbidden`` unless ``user`` carries the ADMIN role."""
    if not is_admin(user):
        raise Forbidden('administrator role required')


def require_self_or_admin(user, target_user_id) -> None:
    """Non-admins may only act on their own records."""
    if is_admin(user):
        return
    if not user or getattr(user, 'id', None) != target_user_id:
        raise Forbidden('cannot access another user\'s records')


class IsAdminRole(BasePermission):
    """Allow access only to users with the administrative role."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return is_admin(getattr(request, "user", None))

