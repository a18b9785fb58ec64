# auth.py: session identity and the ownership/admin guard

from collections import namedtuple
from functools import wraps

from flask import session

import db as store
from errors import Forbidden, Unauthenticated
from config import get_logger

logger = get_logger(__name__)

Identity = namedtuple("Identity", ["user_id", "name", "email", "is_student", "is_admin"])


def identity_for(user):
    return Identity(
        user_id=user.id,
        name=user.name,
        email=user.email,
        is_student=bool(user.is_student),
        is_admin=bool(user.is_admin),
    )


def start_session(user):
    session.clear()
    session.permanent = True
    session["user_id"] = user.id


def end_session():
    session.clear()


def current_identity():
    """
    Identity of the request's session user, or None.

    Flags are read from the users table on every request so that role
    changes and deletions made by an admin apply to live sessions.
    """
    user_id = session.get("user_id")
    if user_id is None:
        return None
    user = store.find_user(user_id)
    if user is None:
        logger.info(f"Session refers to missing user {user_id}; clearing it")
        session.clear()
        return None
    return identity_for(user)


def ensure_owner(identity, owner_id, allow_admin=True):
    if identity is None:
        raise Unauthenticated()
    if identity.user_id == owner_id:
        return
    if allow_admin and identity.is_admin:
        return
    logger.warning(f"User {identity.user_id} denied access to a resource owned by {owner_id}")
    raise Forbidden()


def can_access(identity, owner_id):
    return identity is not None and (identity.user_id == owner_id or identity.is_admin)


def require_auth(view):
    """Pass the session identity to ``view`` as its first argument."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        identity = current_identity()
        if identity is None:
            raise Unauthenticated()
        return view(identity, *args, **kwargs)
    return wrapper


def require_admin(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        identity = current_identity()
        if identity is None or not identity.is_admin:
            raise Forbidden("Admin access required")
        return view(identity, *args, **kwargs)
    return wrapper
