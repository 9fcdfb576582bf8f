from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from ..domain.errors import InvalidBookingInputError, PromoCodeInvalidError, PromoCodeNotFoundError
from ..domain.pricing import PromoEvaluation, calculate_discount, evaluate_promo, is_promo_valid, normalize_promo_code
from ..domain.repositories import PromoCodeRepository
from ..models import DiscountType


@dataclass(frozen=True)
class PromoQuote:
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    discount_amount: Decimal


async def evaluate_promo_code(
    promo_repo: PromoCodeRepository,
    code: str,
    original_price: Decimal,
    *,
    now: datetime,
) -> PromoEvaluation:
    """Case-insensitive lookup followed by the pure evaluation. Read-only."""
    promo = await promo_repo.get_by_code(normalize_promo_code(code))
    return evaluate_promo(promo, original_price, now=now)


async def quote_promo_code(
    promo_repo: PromoCodeRepository,
    *,
    code: str,
    original_price: Decimal,
    now: datetime,
) -> PromoQuote:
    """Advisory pre-check for the checkout page; booking creation re-evaluates."""
    normalized = normalize_promo_code(code)
    if not normalized:
        raise InvalidBookingInputError("promo code is required")
    if not original_price.is_finite() or original_price <= 0:
        raise InvalidBookingInputError("original price must be a positive number")

    promo = await promo_repo.get_by_code(normalized)
    if promo is None:
        raise PromoCodeNotFoundError("invalid promo code")
    if not is_promo_valid(promo, now=now):
        raise PromoCodeInvalidError("invalid or expired promo code")
    return PromoQuote(
        code=promo.code,
        discount_type=promo.discount_type,
        discount_value=Decimal(promo.discount_value),
        discount_amount=calculate_discount(promo, original_price),
    )
