"""
Pytest configuration and fixtures.

Every test gets a fresh app bound to an in-memory SQLite database.
"""

from datetime import date
from decimal import Decimal

import pytest
from dateutil.relativedelta import relativedelta
from werkzeug.security import generate_password_hash

from app import create_app
from database import db
from models import Booking, PromoCode, User


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "SECRET_KEY": "test-secret",
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app


def adult_dob(years=30):
    return (date.today() - relativedelta(years=years)).isoformat()


def make_user(app, name="Traveller", email="traveller@example.com", password="secret123",
              is_student=False, is_admin=False):
    with app.app_context():
        user = User(
            name=name,
            email=email,
            password=generate_password_hash(password),
            dob=date(1990, 1, 1),
            is_student=is_student,
            is_admin=is_admin,
        )
        db.session.add(user)
        db.session.commit()
        return user.id


def make_promo(app, code="SAVE10", discount_type="percentage", value="10.00", min_amount="0",
               max_uses=None, current_uses=0, valid_from=None, valid_until=None, is_active=True):
    today = date.today()
    with app.app_context():
        promo = PromoCode(
            code=code,
            discount_type=discount_type,
            discount_value=Decimal(value),
            min_booking_amount=Decimal(min_amount),
            max_uses=max_uses,
            current_uses=current_uses,
            valid_from=valid_from or today - relativedelta(days=1),
            valid_until=valid_until or today + relativedelta(days=1),
            is_active=is_active,
        )
        db.session.add(promo)
        db.session.commit()
        return promo.id


def login(client, identifier, password="secret123"):
    return client.post("/api/login", json={"identifier": identifier, "password": password})


def logged_in_client(app, **user_kwargs):
    """A fresh test client with its own cookie jar, logged in as a new user."""
    user_id = make_user(app, **user_kwargs)
    client = app.test_client()
    resp = login(client, user_kwargs.get("email", "traveller@example.com"), user_kwargs.get("password", "secret123"))
    assert resp.status_code == 200
    return client, user_id


def create_booking(client, **overrides):
    payload = {
        "type": "flight",
        "itemName": "IndiGo - Delhi to Mumbai",
        "price": 2500,
        "details": {"from": "Delhi", "to": "Mumbai"},
        "travelDate": "2030-11-15",
    }
    payload.update(overrides)
    return client.post("/api/bookings", json=payload)


def booking_status(app, booking_id):
    with app.app_context():
        return db.session.get(Booking, booking_id).status


@pytest.fixture
def traveller(app):
    return logged_in_client(app)


@pytest.fixture
def other_traveller(app):
    return logged_in_client(app, name="Other", email="other@example.com")


@pytest.fixture
def admin_client(app):
    return logged_in_client(app, name="Admin User", email="admin@example.com", is_admin=True)
