"""
Promo-code validation, discount calculation and redemption.

The calculator is pure: it never reads the store and never looks at a
promo's minimum booking amount or usage counter. Those are caller policies
and live in :func:`quote_price` and :func:`redeem_promo`.
"""

from collections import namedtuple
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from utils import quantize
import db as store
from config import get_logger

logger = get_logger(__name__)

STUDENT_DISCOUNT_RATE = Decimal("0.10")
ZERO = Decimal("0.00")

PromoDiscount = namedtuple("PromoDiscount", ["code", "kind", "value", "min_booking_amount"])
Quote = namedtuple("Quote", ["original_price", "final_price", "discount", "promo_code"])


def validate_promo(promo, today: date) -> Optional[PromoDiscount]:
    """Discount carried by ``promo`` on ``today``, or None if it does not apply."""
    if promo is None or not promo.is_redeemable_on(today):
        return None
    return PromoDiscount(
        code=promo.code,
        kind=promo.discount_type,
        value=Decimal(promo.discount_value),
        min_booking_amount=Decimal(promo.min_booking_amount or ZERO),
    )


def find_valid_promo(code: Optional[str], today: Optional[date] = None) -> Optional[PromoDiscount]:
    """Look a code up and validate it. Missing, expired or used-up codes give None."""
    if not isinstance(code, str) or not code.strip():
        return None
    today = today or date.today()
    promo = validate_promo(store.find_promo_code(code), today)
    if promo is None:
        logger.info(f"Promo code {code!r} is not redeemable on {today}")
    return promo


def calculate_discount(price: Decimal, is_student: bool,
                       promo: Optional[PromoDiscount] = None) -> Tuple[Decimal, Decimal]:
    """
    Returns ``(final_price, total_discount)``.

    Student discount comes first; a percentage promo applies to the
    post-student amount, a fixed promo is a flat amount. The final price
    never goes below zero.
    """
    price = Decimal(price)
    student_discount = price * STUDENT_DISCOUNT_RATE if is_student else ZERO

    promo_discount = ZERO
    if promo is not None:
        if promo.kind == "percentage":
            promo_discount = (price - student_discount) * (promo.value / Decimal(100))
        elif promo.kind == "fixed":
            promo_discount = promo.value

    total_discount = student_discount + promo_discount
    final_price = max(price - total_discount, ZERO)
    return quantize(final_price), quantize(total_discount)


def quote_price(price: Decimal, is_student: bool, code: Optional[str] = None,
                today: Optional[date] = None) -> Quote:
    """Price a booking, dropping promos whose minimum amount the price misses."""
    promo = find_valid_promo(code, today)
    if promo is not None and price < promo.min_booking_amount:
        logger.info(f"Promo code {promo.code} needs a booking of at least {promo.min_booking_amount}")
        promo = None

    final_price, discount = calculate_discount(price, is_student, promo)
    return Quote(
        original_price=quantize(Decimal(price)),
        final_price=final_price,
        discount=discount,
        promo_code=promo.code if promo else None,
    )


def redeem_promo(code: str, today: Optional[date] = None) -> bool:
    """
    Consume one use of ``code``. Runs inside the caller's transaction.

    Returns False when the code went out of its window or reached its cap
    since it was quoted.
    """
    today = today or date.today()
    redeemed = store.increment_promo_usage(code, today)
    if redeemed:
        logger.info(f"Promo code {code} redeemed")
    else:
        logger.warning(f"Promo code {code} could not be redeemed (exhausted or expired)")
    return redeemed
