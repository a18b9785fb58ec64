from datetime import datetime

from flask import Blueprint, jsonify, request

import accounts
import admin
import travel
from auth import current_identity, end_session, require_admin, require_auth, start_session

from config import get_logger
logger = get_logger(__name__)


travel_bp = Blueprint("travel", __name__)
admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


def request_data():
    """JSON body, or the form fields of an urlencoded post."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


# === Accounts ===

@travel_bp.route("/api/register", methods=["POST"])
def register():
    accounts.register_user(request_data())
    return jsonify({"success": True, "message": "Registered successfully"})


@travel_bp.route("/api/login", methods=["POST"])
def login():
    form = request_data()
    user = accounts.authenticate(form.get("identifier"), form.get("password"))
    start_session(user)
    return jsonify({"success": True, "user": user.session_payload()})


@travel_bp.route("/api/logout", methods=["POST"])
def logout():
    identity = current_identity()
    end_session()
    if identity is not None:
        logger.info(f"User {identity.user_id} logged out")
    return jsonify({"success": True})


@travel_bp.route("/api/session", methods=["GET"])
def session_status():
    identity = current_identity()
    if identity is None:
        return jsonify({"loggedIn": False})
    return jsonify({
        "loggedIn": True,
        "user": {
            "id": identity.user_id,
            "name": identity.name,
            "email": identity.email,
            "isStudent": identity.is_student,
            "isAdmin": identity.is_admin,
        },
    })


@travel_bp.route("/api/user", methods=["GET"])
@require_auth
def current_user(identity):
    user = accounts.get_profile(identity)
    return jsonify({"success": True, "user": user.to_dict()})


# === Bookings ===

@travel_bp.route("/api/bookings", methods=["POST"])
@require_auth
def create_booking(identity):
    booking = travel.create_booking(identity, request_data())
    return jsonify({
        "success": True,
        "bookingId": booking.id,
        "message": "Booking created successfully",
    })


@travel_bp.route("/api/bookings/quote", methods=["POST"])
@require_auth
def quote_booking(identity):
    quote = travel.quote_booking(identity, request_data())
    return jsonify({
        "success": True,
        "originalPrice": str(quote.original_price),
        "finalPrice": str(quote.final_price),
        "discount": str(quote.discount),
        "promoCode": quote.promo_code,
    })


@travel_bp.route("/api/bookings", methods=["GET"])
@require_auth
def list_bookings(identity):
    bookings = travel.list_bookings(identity)
    return jsonify({"success": True, "bookings": [b.to_dict() for b in bookings]})


@travel_bp.route("/api/bookings/<int:booking_id>/cancel", methods=["PATCH"])
@require_auth
def cancel_booking(identity, booking_id):
    travel.cancel_booking(identity, booking_id)
    return jsonify({"success": True, "message": "Booking cancelled"})


# === Reviews & favorites ===

@travel_bp.route("/api/reviews", methods=["POST"])
@require_auth
def add_review(identity):
    travel.add_review(identity, request_data())
    return jsonify({"success": True, "message": "Review added"})


@travel_bp.route("/api/reviews/<path:item_name>", methods=["GET"])
def item_reviews(item_name):
    reviews = travel.reviews_for_item(item_name)
    return jsonify({"success": True, "reviews": [r.to_dict() for r in reviews]})


@travel_bp.route("/api/favorites", methods=["POST"])
@require_auth
def add_favorite(identity):
    travel.add_favorite(identity, request_data())
    return jsonify({"success": True, "message": "Added to favorites"})


@travel_bp.route("/api/favorites", methods=["GET"])
@require_auth
def list_favorites(identity):
    favorites = travel.list_favorites(identity)
    return jsonify({"success": True, "favorites": [f.to_dict() for f in favorites]})


# === Admin ===

@admin_bp.route("/stats", methods=["GET"])
@require_admin
def stats(identity):
    return jsonify({"success": True, "stats": admin.dashboard_stats()})


@admin_bp.route("/users", methods=["GET"])
@require_admin
def users(identity):
    return jsonify({"success": True, "users": [u.to_dict() for u in admin.all_users()]})


@admin_bp.route("/bookings", methods=["GET"])
@require_admin
def bookings(identity):
    rows = admin.all_bookings()
    return jsonify({"success": True, "bookings": [b.to_dict(with_owner=True) for b in rows]})


@admin_bp.route("/users/<int:user_id>", methods=["PATCH"])
@require_admin
def update_user(identity, user_id):
    admin.update_user_roles(identity, user_id, request_data())
    return jsonify({"success": True, "message": "User updated"})


@admin_bp.route("/users/<int:user_id>", methods=["DELETE"])
@require_admin
def delete_user(identity, user_id):
    admin.delete_user(identity, user_id)
    return jsonify({"success": True, "message": "User deleted"})


# === Health Check ===

@travel_bp.route("/ping", methods=["GET"])
def ping():
    return "pong"


@travel_bp.route("/health", methods=["GET"])
def health():
    return jsonify({'status': 'ok', 'timestamp': datetime.utcnow().isoformat()})
