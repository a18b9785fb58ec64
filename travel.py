# travel.py: booking lifecycle, reviews and favorites

from datetime import date
from decimal import Decimal

import db as store
from database import db
from auth import can_access, ensure_owner
from errors import Conflict, NotFound, ValidationError
from models import BOOKING_TYPES, FAVORITE_TYPES, Booking, Favorite, Review
from pricing import quote_price, redeem_promo
from utils import parse_date, text_field, to_money

from config import get_logger

logger = get_logger(__name__)

CANCELLABLE_STATUSES = ("confirmed", "pending")
# Largest value a NUMERIC(10, 2) price column holds
MAX_PRICE = Decimal("99999999.99")


# --------------------------
# Bookings
# --------------------------

def _booking_price(raw):
    price = to_money(raw)
    if price is None:
        raise ValidationError("Price must be a number")
    if price < 0:
        raise ValidationError("Price cannot be negative")
    if price > MAX_PRICE:
        raise ValidationError(f"Price cannot exceed {MAX_PRICE}")
    return price


def quote_booking(identity, form, today=None):
    if form.get("price") in (None, ""):
        raise ValidationError("Missing required fields")
    price = _booking_price(form.get("price"))
    return quote_price(price, identity.is_student, form.get("promoCode"), today)


def create_booking(identity, form, today=None):
    booking_type = form.get("type")
    item_name = text_field(form, "itemName")
    raw_price = form.get("price")

    if not booking_type or not item_name or raw_price in (None, ""):
        raise ValidationError("Missing required fields")
    if booking_type not in BOOKING_TYPES:
        raise ValidationError(f"Booking type must be one of: {', '.join(BOOKING_TYPES)}")

    price = _booking_price(raw_price)

    travel_date = None
    if form.get("travelDate"):
        travel_date = parse_date(form.get("travelDate"))
        if travel_date is None:
            raise ValidationError("Invalid travel date")

    today = today or date.today()
    quote = quote_price(price, identity.is_student, form.get("promoCode"), today)

    if quote.promo_code and not redeem_promo(quote.promo_code, today):
        db.session.rollback()
        raise Conflict("Promo code is no longer available")

    booking = Booking(
        user_id=identity.user_id,
        booking_type=booking_type,
        item_name=item_name,
        price=quote.final_price,
        details=form.get("details") or {},
        travel_date=travel_date,
        status="confirmed",
        promo_code=quote.promo_code,
        discount=quote.discount,
    )
    # Promo redemption and the booking row commit together
    store.insert_booking(booking)
    logger.info(f"Booking {booking.id} created for user {identity.user_id}: {booking_type} {item_name!r} at {booking.price}")
    return booking


def list_bookings(identity):
    return store.find_bookings_by_user(identity.user_id)


def cancel_booking(identity, booking_id):
    """
    Move a confirmed or pending booking to cancelled.

    Cancelling an already cancelled booking succeeds without changes.
    Bookings the caller may not touch are reported as missing.
    """
    booking = store.find_booking(booking_id)
    if booking is None or not can_access(identity, booking.user_id):
        raise NotFound("Booking not found")

    if booking.status == "cancelled":
        logger.info(f"Booking {booking_id} already cancelled")
        return booking
    if booking.status not in CANCELLABLE_STATUSES:
        raise Conflict(f"Cannot cancel a {booking.status} booking")

    affected = store.update_booking_status(booking_id, "cancelled", CANCELLABLE_STATUSES)
    db.session.refresh(booking)
    if affected == 0 and booking.status != "cancelled":
        # Status moved under us to something that is not cancellable
        raise Conflict(f"Cannot cancel a {booking.status} booking")

    logger.info(f"Booking {booking_id} cancelled by user {identity.user_id}")
    return booking


# --------------------------
# Reviews
# --------------------------

def _rating(raw):
    if isinstance(raw, bool):
        raise ValidationError("Rating must be an integer between 1 and 5")
    if isinstance(raw, str) and raw.strip().isdigit():
        raw = int(raw.strip())
    if not isinstance(raw, int) or not 1 <= raw <= 5:
        raise ValidationError("Rating must be an integer between 1 and 5")
    return raw


def _booking_id(raw):
    if isinstance(raw, bool):
        raise ValidationError("Invalid booking id")
    if isinstance(raw, str) and raw.strip().isdigit():
        raw = int(raw.strip())
    if not isinstance(raw, int) or raw < 1:
        raise ValidationError("Invalid booking id")
    return raw


def add_review(identity, form):
    booking_id = form.get("bookingId")
    raw_rating = form.get("rating")
    if not booking_id or raw_rating in (None, ""):
        raise ValidationError("Missing required fields")

    rating = _rating(raw_rating)
    booking_id = _booking_id(booking_id)

    booking = store.find_booking(booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    # Only the traveller who made the booking may review it
    ensure_owner(identity, booking.user_id, allow_admin=False)

    review = Review(
        user_id=identity.user_id,
        booking_id=booking.id,
        rating=rating,
        comment=text_field(form, "comment") or None,
    )
    store.insert_review(review)
    logger.info(f"Review {review.id} added to booking {booking.id} ({rating}/5)")
    return review


def reviews_for_item(item_name):
    return store.find_reviews_by_item(item_name)


# --------------------------
# Favorites
# --------------------------

def add_favorite(identity, form):
    item_type = form.get("itemType")
    item_name = text_field(form, "itemName")
    if not item_type or not item_name:
        raise ValidationError("Missing required fields")
    if item_type not in FAVORITE_TYPES:
        raise ValidationError(f"Item type must be one of: {', '.join(FAVORITE_TYPES)}")

    favorite = Favorite(
        user_id=identity.user_id,
        item_type=item_type,
        item_name=item_name,
        item_details=form.get("itemDetails") or {},
    )
    store.insert_favorite(favorite)
    logger.info(f"User {identity.user_id} saved {item_type} {item_name!r} to favorites")
    return favorite


def list_favorites(identity):
    return store.find_favorites_by_user(identity.user_id)
