"""Middleware for authentication context."""
from functools import wraps
from flask import session, g, current_app
from app.database import get_session
from app.exceptions import UnauthorizedError, RemoteReadError
from app.services.row_store import RowStore


def load_current_profile():
    """
    Load the row store and the current profile into g (Flask's per-request global).

    Called before each request. The hosted auth provider stores the
    authenticated user id in the session; role and school/store ids come
    from the profiles table. Sets g.store, g.profile and g.user_role.
    """
    g.store = RowStore(get_session(), read_retries=current_app.config.get('READ_RETRIES', 2))
    g.profile = None
    g.user_role = None

    user_id = session.get('user_id')
    if not user_id:
        return

    try:
        profile = g.store.get('profiles', user_id)
    except RemoteReadError as e:
        # Avoid crashing the whole app if context loading fails
        current_app.logger.error(f"Error in load_current_profile: {e}")
        return

    if profile:
        g.profile = profile
        g.user_role = profile.role
    else:
        # Stale session: the profile no longer exists
        session.pop('user_id', None)


def require_login(f):
    """
    Decorator: Require an authenticated profile.

    Raises UnauthorizedError, rendered as a JSON 403 by the error handler.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('profile') is None:
            raise UnauthorizedError('Vous devez être connecté pour accéder à cette page.')
        return f(*args, **kwargs)
    return decorated_function
