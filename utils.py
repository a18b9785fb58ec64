import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

import dateparser
from dateutil.relativedelta import relativedelta

from errors import ValidationError

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
MINIMUM_AGE = 18
TRUE_STRINGS = ("true", "1", "yes", "on")


def parse_date(text) -> Optional[date]:
    """
    Parses a date string (e.g. '2001-04-17', '17 April 2001') into a date.
    Day, month and year must all be present. Returns None if parsing fails.
    """
    if isinstance(text, datetime):
        return text.date()
    if isinstance(text, date):
        return text
    if not text or not isinstance(text, str):
        return None
    parsed = dateparser.parse(text.strip(), settings={"STRICT_PARSING": True})
    if not parsed:
        logger.debug(f"Unparseable date: {text!r}")
        return None
    return parsed.date()


def calculate_age(dob: date, today: Optional[date] = None) -> int:
    """Whole years between dob and today, by calendar (leap days included)."""
    today = today or date.today()
    return relativedelta(today, dob).years


def is_adult(dob: date, today: Optional[date] = None) -> bool:
    return calculate_age(dob, today) >= MINIMUM_AGE


def to_money(value) -> Optional[Decimal]:
    """Coerce a JSON number/string to a 2-decimal Decimal, None if not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    try:
        return quantize(amount)
    except InvalidOperation:
        # Exponent too large for the context precision
        return None


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def text_field(form, key) -> str:
    """Stripped text of a form field; '' when absent, ValidationError when not text."""
    value = form.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value.strip()


def to_bool(value, default=False) -> bool:
    """JSON booleans pass through; form strings only count when they say so."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    if isinstance(value, int):
        return value == 1
    return False
