from decimal import Decimal

from database import db
from models import Booking, PromoCode
from conftest import booking_status, create_booking, logged_in_client, make_promo


class TestCreateBooking:
    def test_requires_session(self, client):
        resp = create_booking(client)
        assert resp.status_code == 401
        assert resp.get_json() == {"error": "Not authenticated"}

    def test_create_defaults_to_confirmed(self, app, traveller):
        client, user_id = traveller
        resp = create_booking(client)
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["success"] is True
        assert body["message"] == "Booking created successfully"
        with app.app_context():
            booking = db.session.get(Booking, body["bookingId"])
            assert booking.user_id == user_id
            assert booking.status == "confirmed"
            assert booking.price == Decimal("2500.00")
            assert booking.details == {"from": "Delhi", "to": "Mumbai"}
            assert booking.travel_date.isoformat() == "2030-11-15"

    def test_missing_fields(self, traveller):
        client, _ = traveller
        assert create_booking(client, itemName="").status_code == 400
        assert create_booking(client, price=None).status_code == 400

    def test_unknown_type(self, traveller):
        client, _ = traveller
        assert create_booking(client, type="spaceship").status_code == 400

    def test_negative_price(self, traveller):
        client, _ = traveller
        resp = create_booking(client, price=-10)
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Price cannot be negative"}

    def test_non_text_item_name_is_refused(self, traveller):
        client, _ = traveller
        resp = create_booking(client, itemName=777)
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "itemName must be a string"}

    def test_huge_exponent_price_is_refused(self, traveller):
        client, _ = traveller
        resp = create_booking(client, price="1e400")
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Price must be a number"}

    def test_price_above_column_range_is_refused(self, traveller):
        client, _ = traveller
        resp = create_booking(client, price=100000000)
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Price cannot exceed 99999999.99"}
        assert create_booking(client, price="99999999.99").status_code == 200

    def test_non_text_promo_code_books_at_full_price(self, app, traveller):
        client, _ = traveller
        resp = create_booking(client, price=100, promoCode=12345)
        assert resp.status_code == 200
        with app.app_context():
            booking = db.session.get(Booking, resp.get_json()["bookingId"])
            assert booking.price == Decimal("100.00")
            assert booking.discount == Decimal("0.00")
            assert booking.promo_code is None

    def test_student_discount_is_applied(self, app):
        client, _ = logged_in_client(app, is_student=True)
        booking_id = create_booking(client, price=2000).get_json()["bookingId"]
        with app.app_context():
            booking = db.session.get(Booking, booking_id)
            assert booking.price == Decimal("1800.00")
            assert booking.discount == Decimal("200.00")

    def test_promo_code_is_applied_and_redeemed(self, app):
        promo_id = make_promo(app, code="WELCOME10", value="10.00", min_amount="1000", max_uses=100)
        client, _ = logged_in_client(app, is_student=True)
        booking_id = create_booking(client, price=2000, promoCode="WELCOME10").get_json()["bookingId"]
        with app.app_context():
            booking = db.session.get(Booking, booking_id)
            # 200 student + 1800 * 10%
            assert booking.discount == Decimal("380.00")
            assert booking.price == Decimal("1620.00")
            assert booking.promo_code == "WELCOME10"
            assert db.session.get(PromoCode, promo_id).current_uses == 1

    def test_promo_below_minimum_is_not_redeemed(self, app, traveller):
        promo_id = make_promo(app, code="FLAT500", discount_type="fixed", value="500", min_amount="2000")
        client, _ = traveller
        booking_id = create_booking(client, price=1500, promoCode="FLAT500").get_json()["bookingId"]
        with app.app_context():
            booking = db.session.get(Booking, booking_id)
            assert booking.price == Decimal("1500.00")
            assert booking.promo_code is None
            assert db.session.get(PromoCode, promo_id).current_uses == 0

    def test_exhausted_promo_is_ignored(self, app, traveller):
        make_promo(app, code="GONE", max_uses=1, current_uses=1)
        client, _ = traveller
        booking_id = create_booking(client, price=100, promoCode="GONE").get_json()["bookingId"]
        with app.app_context():
            assert db.session.get(Booking, booking_id).price == Decimal("100.00")

    def test_single_use_promo_serves_one_booking(self, app, traveller, other_traveller):
        promo_id = make_promo(app, code="ONCE", discount_type="fixed", value="50", max_uses=1)
        first, _ = traveller
        second, _ = other_traveller
        a = create_booking(first, price=100, promoCode="ONCE").get_json()["bookingId"]
        b = create_booking(second, price=100, promoCode="ONCE").get_json()["bookingId"]
        with app.app_context():
            assert db.session.get(Booking, a).price == Decimal("50.00")
            assert db.session.get(Booking, b).price == Decimal("100.00")
            assert db.session.get(PromoCode, promo_id).current_uses == 1


class TestQuote:
    def test_quote_has_no_side_effects(self, app):
        promo_id = make_promo(app, code="STUDENT15", value="15.00", min_amount="500")
        client, _ = logged_in_client(app, is_student=True)
        resp = client.post("/api/bookings/quote", json={"price": "1000", "promoCode": "STUDENT15"})
        assert resp.status_code == 200
        assert resp.get_json() == {
            "success": True,
            "originalPrice": "1000.00",
            "finalPrice": "765.00",
            "discount": "235.00",
            "promoCode": "STUDENT15",
        }
        with app.app_context():
            assert db.session.get(PromoCode, promo_id).current_uses == 0
            assert Booking.query.count() == 0

    def test_quote_requires_price(self, traveller):
        client, _ = traveller
        assert client.post("/api/bookings/quote", json={}).status_code == 400


class TestListBookings:
    def test_lists_only_own_bookings_newest_first(self, traveller, other_traveller):
        client, user_id = traveller
        other, _ = other_traveller
        first = create_booking(client, itemName="Taj Resort", type="hotel").get_json()["bookingId"]
        second = create_booking(client, itemName="Rajdhani Express", type="train").get_json()["bookingId"]
        create_booking(other, itemName="Someone else's car", type="car")

        body = client.get("/api/bookings").get_json()
        assert body["success"] is True
        assert [b["id"] for b in body["bookings"]] == [second, first]
        assert all(b["user_id"] == user_id for b in body["bookings"])
        assert body["bookings"][0]["price"] == "2500.00"
        assert body["bookings"][0]["details"] == {"from": "Delhi", "to": "Mumbai"}


class TestCancelBooking:
    def test_cancel_is_idempotent(self, app, traveller):
        client, _ = traveller
        booking_id = create_booking(client).get_json()["bookingId"]

        first = client.patch(f"/api/bookings/{booking_id}/cancel")
        assert first.status_code == 200
        assert first.get_json() == {"success": True, "message": "Booking cancelled"}
        assert booking_status(app, booking_id) == "cancelled"

        second = client.patch(f"/api/bookings/{booking_id}/cancel")
        assert second.status_code == 200
        assert booking_status(app, booking_id) == "cancelled"

    def test_pending_booking_can_be_cancelled(self, app, traveller):
        client, _ = traveller
        booking_id = create_booking(client).get_json()["bookingId"]
        with app.app_context():
            db.session.get(Booking, booking_id).status = "pending"
            db.session.commit()
        assert client.patch(f"/api/bookings/{booking_id}/cancel").status_code == 200
        assert booking_status(app, booking_id) == "cancelled"

    def test_completed_booking_cannot_be_cancelled(self, app, traveller):
        client, _ = traveller
        booking_id = create_booking(client).get_json()["bookingId"]
        with app.app_context():
            db.session.get(Booking, booking_id).status = "completed"
            db.session.commit()
        assert client.patch(f"/api/bookings/{booking_id}/cancel").status_code == 409
        assert booking_status(app, booking_id) == "completed"

    def test_missing_booking(self, traveller):
        client, _ = traveller
        resp = client.patch("/api/bookings/999/cancel")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Booking not found"}

    def test_other_users_booking_is_not_found(self, app, traveller, other_traveller):
        owner, _ = traveller
        intruder, _ = other_traveller
        booking_id = create_booking(owner).get_json()["bookingId"]
        assert intruder.patch(f"/api/bookings/{booking_id}/cancel").status_code == 404
        assert booking_status(app, booking_id) == "confirmed"

    def test_admin_can_cancel_any_booking(self, app, traveller, admin_client):
        owner, _ = traveller
        admin, _ = admin_client
        booking_id = create_booking(owner).get_json()["bookingId"]
        assert admin.patch(f"/api/bookings/{booking_id}/cancel").status_code == 200
        assert booking_status(app, booking_id) == "cancelled"

    def test_requires_session(self, client):
        assert client.patch("/api/bookings/1/cancel").status_code == 401
