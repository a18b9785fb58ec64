# admin.py: admin rollups and user management

from decimal import Decimal

import db as store
from errors import NotFound, ValidationError
from utils import to_bool
from config import get_logger

logger = get_logger(__name__)

RECENT_BOOKINGS_LIMIT = 5


def dashboard_stats():
    """Counts and confirmed revenue, computed fresh on each call."""
    revenue = store.sum_confirmed_revenue()
    return {
        "totalUsers": store.count_users(),
        "totalBookings": store.count_bookings(),
        "totalRevenue": str(Decimal(revenue).quantize(Decimal("0.01")) if revenue is not None else Decimal("0.00")),
        "recentBookings": [b.to_dict(with_owner=True) for b in store.recent_bookings(RECENT_BOOKINGS_LIMIT)],
    }


def all_users():
    return store.list_users()


def all_bookings():
    return store.find_all_bookings()


def _get_user(user_id):
    user = store.find_user(user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def update_user_roles(identity, user_id, form):
    user = _get_user(user_id)
    user.is_admin = to_bool(form.get("isAdmin"))
    user.is_student = to_bool(form.get("isStudent"))
    store.commit()
    logger.info(f"Admin {identity.user_id} set roles of user {user_id}: admin={user.is_admin} student={user.is_student}")
    return user


def delete_user(identity, user_id):
    if user_id == identity.user_id:
        raise ValidationError("Cannot delete your own account")
    user = _get_user(user_id)
    store.delete_user(user)
    logger.info(f"Admin {identity.user_id} deleted user {user_id}")
