# db.py

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from database import db
from errors import Conflict
from models import Booking, Favorite, PromoCode, Review, User
from config import get_logger

logger = get_logger(__name__)

# --------------------------
# Transaction helpers
# --------------------------

def _save(obj, commit=True, conflict_message=None):
    db.session.add(obj)
    try:
        if commit:
            db.session.commit()
        else:
            db.session.flush()
    except IntegrityError as e:
        db.session.rollback()
        if conflict_message:
            logger.info(f"Rejected duplicate {type(obj).__name__}: {e.orig}")
            raise Conflict(conflict_message) from e
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error saving {type(obj).__name__}: {e}")
        raise
    return obj


def commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


# --------------------------
# Users
# --------------------------

def find_user_by_email(email):
    return User.query.filter(func.lower(User.email) == email.strip().lower()).first()


def find_user_by_identifier(identifier):
    """Login lookup: email, or name compared case-insensitively."""
    ident = identifier.strip().lower()
    return (
        User.query
        .filter(or_(func.lower(User.email) == ident, func.lower(User.name) == ident))
        .order_by(User.id)
        .first()
    )


def find_user(user_id):
    return db.session.get(User, user_id)


def insert_user(user, commit=True):
    return _save(user, commit=commit, conflict_message="Email already registered")


def list_users():
    return User.query.order_by(User.created_at.desc(), User.id.desc()).all()


def delete_user(user):
    db.session.delete(user)
    commit()


# --------------------------
# Bookings
# --------------------------

def insert_booking(booking, commit=True):
    return _save(booking, commit=commit)


def find_booking(booking_id):
    return db.session.get(Booking, booking_id)


def find_bookings_by_user(user_id):
    return (
        Booking.query
        .filter(Booking.user_id == user_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .all()
    )


def find_all_bookings(limit=None):
    query = Booking.query.order_by(Booking.created_at.desc(), Booking.id.desc())
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def update_booking_status(booking_id, new_status, from_statuses):
    """Conditional status update; returns the number of rows changed."""
    affected = (
        Booking.query
        .filter(Booking.id == booking_id, Booking.status.in_(from_statuses))
        .update({Booking.status: new_status}, synchronize_session=False)
    )
    commit()
    return affected


# --------------------------
# Reviews / favorites
# --------------------------

def insert_review(review, commit=True):
    return _save(review, commit=commit)


def find_reviews_by_item(item_name, limit=20):
    return (
        Review.query
        .join(Booking, Review.booking_id == Booking.id)
        .filter(Booking.item_name == item_name)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .limit(limit)
        .all()
    )


def insert_favorite(favorite, commit=True):
    return _save(favorite, commit=commit, conflict_message="Already in favorites")


def find_favorites_by_user(user_id):
    return (
        Favorite.query
        .filter(Favorite.user_id == user_id)
        .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        .all()
    )


# --------------------------
# Promo codes
# --------------------------

def find_promo_code(code):
    return PromoCode.query.filter(PromoCode.code == code.strip()).first()


def insert_promo_code(promo, commit=True):
    return _save(promo, commit=commit, conflict_message="Promo code already exists")


def increment_promo_usage(code, today):
    """
    Compare-and-increment of the usage counter in one UPDATE statement.

    The WHERE clause repeats every redeemability condition, so the row only
    changes while the code is still within its cap. Returns True when this
    call consumed a use. Does not commit.
    """
    affected = (
        PromoCode.query
        .filter(
            PromoCode.code == code,
            PromoCode.is_active.is_(True),
            PromoCode.valid_from <= today,
            PromoCode.valid_until >= today,
            or_(PromoCode.max_uses.is_(None), PromoCode.current_uses < PromoCode.max_uses),
        )
        .update({PromoCode.current_uses: PromoCode.current_uses + 1}, synchronize_session=False)
    )
    return affected == 1


# --------------------------
# Aggregates
# --------------------------

def count_users():
    return db.session.query(func.count(User.id)).scalar()


def count_bookings():
    return db.session.query(func.count(Booking.id)).scalar()


def sum_confirmed_revenue():
    return db.session.query(func.sum(Booking.price)).filter(Booking.status == "confirmed").scalar()


def recent_bookings(limit=5):
    return find_all_bookings(limit=limit)
