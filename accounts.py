# accounts.py: registration and credential checks

from datetime import date

from werkzeug.security import check_password_hash, generate_password_hash

import db as store
from errors import Conflict, NotFound, Unauthenticated, ValidationError
from models import User
from utils import is_adult, parse_date, text_field, to_bool
from config import get_logger

logger = get_logger(__name__)


def register_user(form, today=None):
    name = text_field(form, "name")
    email = text_field(form, "email").lower()
    password = form.get("password") or ""
    if not isinstance(password, str):
        raise ValidationError("password must be a string")
    dob_raw = form.get("dob")

    if not name or not email or not password or not dob_raw:
        raise ValidationError("Missing required fields")

    dob = parse_date(dob_raw)
    if dob is None:
        raise ValidationError("Invalid date of birth")
    if not is_adult(dob, today or date.today()):
        logger.info(f"Registration refused for {email}: under 18")
        raise ValidationError("You must be at least 18 years old to register")

    if store.find_user_by_email(email):
        raise Conflict("Email already registered")

    user = User(
        name=name,
        email=email,
        password=generate_password_hash(password),
        dob=dob,
        is_student=to_bool(form.get("isStudent")),
    )
    store.insert_user(user)
    logger.info(f"Registered user {user.id} ({email})")
    return user


def authenticate(identifier, password):
    if not isinstance(identifier, str) or not isinstance(password, str):
        raise ValidationError("Missing fields")
    if not identifier or not password:
        raise ValidationError("Missing fields")

    user = store.find_user_by_identifier(identifier)
    if user is None or not check_password_hash(user.password, password):
        logger.warning(f"Failed login for {identifier!r}")
        raise Unauthenticated("Invalid credentials")

    logger.info(f"User {user.id} logged in")
    return user


def get_profile(identity):
    user = store.find_user(identity.user_id)
    if user is None:
        raise NotFound("User not found")
    return user
