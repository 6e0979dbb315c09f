"""
Permission decorators for role-based access control.
Extends require_login with role checks.
"""

from functools import wraps
from flask import g
from app.exceptions import UnauthorizedError
from app.models import UserRole


def require_role(*allowed_roles):
    """
    Decorator to restrict access to specific roles.

    Usage:
        @require_role('parent')
        @require_role('parent', 'ecole')

    Args:
        *allowed_roles: Role strings (siege, magasin, ecole, parent)

    Returns:
        Decorator function
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Must be logged in
            if not g.get('profile'):
                raise UnauthorizedError('Vous devez être connecté pour accéder à cette page.')

            user_role = g.get('user_role')
            if not user_role or user_role not in allowed_roles:
                raise UnauthorizedError('Vous n\'avez pas accès à cette fonctionnalité.')

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def parent_only(f):
    """
    Shortcut decorator for buyer-only routes (cart, checkout).

    Usage:
        @parent_only
        def checkout():
            ...
    """
    return require_role(UserRole.PARENT.value)(f)


def school_only(f):
    """Shortcut decorator for school-only routes (sales summary)."""
    return require_role(UserRole.ECOLE.value)(f)


def shop_visitor(f):
    """Shortcut decorator for routes of the shop page (parents and their school)."""
    return require_role(UserRole.PARENT.value, UserRole.ECOLE.value)(f)
