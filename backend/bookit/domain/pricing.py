from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from ..models import DiscountType, PromoCode, normalize_promo_code

CENT = Decimal("0.01")


@dataclass(frozen=True)
class PromoEvaluation:
    valid: bool
    discount_amount: Decimal


INVALID_PROMO = PromoEvaluation(valid=False, discount_amount=Decimal("0"))


def is_promo_valid(promo: PromoCode, *, now: datetime) -> bool:
    """Active, and either without expiry or expiring in the future (naive UTC)."""
    if not promo.is_active:
        return False
    if promo.expires_at is not None and promo.expires_at <= now:
        return False
    return True


def calculate_discount(promo: PromoCode, original_price: Decimal) -> Decimal:
    value = Decimal(promo.discount_value)
    if promo.discount_type == DiscountType.PERCENTAGE:
        discount = (original_price * value / Decimal(100)).quantize(CENT, rounding=ROUND_HALF_UP)
        return min(discount, original_price)
    return min(value, original_price)


def evaluate_promo(promo: PromoCode | None, original_price: Decimal, *, now: datetime) -> PromoEvaluation:
    """
    Pure promo evaluation over an already looked-up record.
    A missing, inactive or expired promo is reported invalid with a zero discount.
    """
    if not original_price.is_finite() or original_price <= 0:
        raise ValueError("original_price must be a finite number greater than zero")
    if promo is None or not is_promo_valid(promo, now=now):
        return INVALID_PROMO
    return PromoEvaluation(valid=True, discount_amount=calculate_discount(promo, original_price))
