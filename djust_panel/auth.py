"""
Permission checks against panel roles.

Administrators (members of the ``administrator`` role, and Django
superusers) pass every check. Failing checks raise ``PermissionDenied``.

    auth.check(request.user, "articles.edit")
    auth.allow(request.user, ["editor", "reviewer"])
"""

import logging

from django.core.exceptions import PermissionDenied

from .helpers import to_list
from .models import Permission, Role

logger = logging.getLogger(__name__)


def _authenticated(user):
    return user is not None and getattr(user, "is_authenticated", False)


def get_roles(user):
    if not _authenticated(user):
        return Role.objects.none()
    return Role.objects.filter(administrators=user)


def is_role(user, role):
    return get_roles(user).filter(slug=role).exists()


def in_roles(user, roles):
    return get_roles(user).filter(slug__in=to_list(roles, filter_empty=True)).exists()


def is_administrator(user):
    if not _authenticated(user):
        return False
    return bool(getattr(user, "is_superuser", False)) or is_role(user, Role.ADMINISTRATOR)


def can(user, permission):
    if is_administrator(user):
        return True
    if not _authenticated(user):
        return False
    return Permission.objects.filter(slug=permission, roles__administrators=user).exists()


def cannot(user, permission):
    return not can(user, permission)


def has_panel_access(user):
    """Staff users and users holding any panel role may enter the panel."""
    if not _authenticated(user):
        return False
    return bool(getattr(user, "is_staff", False)) or is_administrator(user) or get_roles(user).exists()


def check(user, permission):
    """Raise ``PermissionDenied`` unless ``user`` holds ``permission`` (or all of a list)."""
    if is_administrator(user):
        return True
    if isinstance(permission, (list, tuple, set)):
        for item in permission:
            check(user, item)
        return True
    if cannot(user, permission):
        error()
    return True


def allow(user, roles):
    if is_administrator(user):
        return True
    if not in_roles(user, roles):
        error()
    return True


def deny(user, roles):
    if is_administrator(user):
        return True
    if in_roles(user, roles):
        error()
    return True


def free():
    return True


def error(message="Permission denied"):
    logger.info("Permission check failed: %s", message)
    raise PermissionDenied(message)
