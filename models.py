# models.py
from datetime import datetime
from decimal import Decimal

from database import db

BOOKING_TYPES = ("flight", "hotel", "train", "car")
FAVORITE_TYPES = BOOKING_TYPES + ("destination",)
BOOKING_STATUSES = ("pending", "confirmed", "cancelled", "completed")
DISCOUNT_TYPES = ("percentage", "fixed")


def _iso(value):
    return value.isoformat() if value is not None else None


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password = db.Column(db.String(255), nullable=False)
    dob = db.Column(db.Date)
    is_student = db.Column(db.Boolean, nullable=False, default=False)
    is_admin = db.Column(db.Boolean, nullable=False, default=False)
    phone = db.Column(db.String(20))
    address = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    bookings = db.relationship("Booking", back_populates="user", cascade="all, delete-orphan")
    reviews = db.relationship("Review", back_populates="user", cascade="all, delete-orphan")
    favorites = db.relationship("Favorite", back_populates="user", cascade="all, delete-orphan")

    def session_payload(self):
        """Shape returned by login and session lookups."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "isStudent": bool(self.is_student),
            "isAdmin": bool(self.is_admin),
        }

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "dob": _iso(self.dob),
            "is_student": bool(self.is_student),
            "is_admin": bool(self.is_admin),
            "created_at": _iso(self.created_at),
        }


class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    booking_type = db.Column(db.Enum(*BOOKING_TYPES, name="booking_type"), nullable=False, index=True)
    item_name = db.Column(db.String(255), nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    details = db.Column(db.JSON)
    travel_date = db.Column(db.Date)
    status = db.Column(db.Enum(*BOOKING_STATUSES, name="booking_status"), nullable=False, default="confirmed", index=True)
    payment_method = db.Column(db.String(50))
    transaction_id = db.Column(db.String(100))
    promo_code = db.Column(db.String(50))
    discount = db.Column(db.Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship("User", back_populates="bookings")
    reviews = db.relationship("Review", back_populates="booking", cascade="all, delete-orphan")

    __table_args__ = (
        db.CheckConstraint("price >= 0", name="ck_bookings_price_non_negative"),
    )

    def to_dict(self, with_owner=False):
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "booking_type": self.booking_type,
            "item_name": self.item_name,
            "price": str(self.price),
            "details": self.details or {},
            "travel_date": _iso(self.travel_date),
            "status": self.status,
            "payment_method": self.payment_method,
            "transaction_id": self.transaction_id,
            "promo_code": self.promo_code,
            "discount": str(self.discount if self.discount is not None else Decimal("0.00")),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
        if with_owner:
            data["user_name"] = self.user.name
            data["user_email"] = self.user.email
        return data


class Review(db.Model):
    __tablename__ = "reviews"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    booking_id = db.Column(db.Integer, db.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    rating = db.Column(db.Integer, nullable=False, index=True)
    comment = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship("User", back_populates="reviews")
    booking = db.relationship("Booking", back_populates="reviews")

    __table_args__ = (
        db.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "booking_id": self.booking_id,
            "rating": self.rating,
            "comment": self.comment,
            "created_at": _iso(self.created_at),
            "user_name": self.user.name,
        }


class Favorite(db.Model):
    __tablename__ = "favorites"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    item_type = db.Column(db.Enum(*FAVORITE_TYPES, name="favorite_type"), nullable=False)
    item_name = db.Column(db.String(255), nullable=False)
    item_details = db.Column(db.JSON)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship("User", back_populates="favorites")

    __table_args__ = (
        db.UniqueConstraint("user_id", "item_type", "item_name", name="unique_favorite"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "item_type": self.item_type,
            "item_name": self.item_name,
            "item_details": self.item_details or {},
            "created_at": _iso(self.created_at),
        }


class PromoCode(db.Model):
    __tablename__ = "promo_codes"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(50), unique=True, nullable=False, index=True)
    discount_type = db.Column(db.Enum(*DISCOUNT_TYPES, name="discount_type"), nullable=False)
    discount_value = db.Column(db.Numeric(10, 2), nullable=False)
    min_booking_amount = db.Column(db.Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    max_uses = db.Column(db.Integer)
    current_uses = db.Column(db.Integer, nullable=False, default=0)
    valid_from = db.Column(db.Date, nullable=False)
    valid_until = db.Column(db.Date, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def is_redeemable_on(self, today):
        """Active, inside [valid_from, valid_until] and below its use cap."""
        if not self.is_active:
            return False
        if not (self.valid_from <= today <= self.valid_until):
            return False
        uses = self.current_uses or 0
        return self.max_uses is None or uses < self.max_uses
