from datetime import datetime
from decimal import Decimal

import pytest
from bookit.infrastructure.repositories import SqlAlchemyPromoCodeRepository
from bookit.models import DiscountType, PromoCode
from bookit.usecases.promos import evaluate_promo_code
from bookit.utils.time import utc_now_naive
from helpers import add_promo
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

NOW = datetime(2025, 11, 1, 12, 0)


def _row(code: str, discount_type: DiscountType, value: str) -> PromoCode:
    now = utc_now_naive()
    return PromoCode(
        code=code,
        discount_type=discount_type,
        discount_value=Decimal(value),
        is_active=True,
        created_at=now,
        updated_at=now,
    )


@pytest.mark.asyncio
async def test_percentage_above_hundred_is_rejected(session_factory) -> None:
    async with session_factory() as session:
        session.add(_row("HUGE", DiscountType.PERCENTAGE, "150"))
        with pytest.raises(IntegrityError):
            await session.flush()
        await session.rollback()

    async with session_factory() as session:
        assert await session.scalar(select(PromoCode).where(PromoCode.code == "HUGE")) is None


@pytest.mark.asyncio
async def test_full_percentage_and_large_fixed_values_are_stored(session_factory) -> None:
    async with session_factory() as session:
        session.add_all([_row("FREE", DiscountType.PERCENTAGE, "100"), _row("FLAT150", DiscountType.FIXED, "150")])
        await session.commit()

    async with session_factory() as session:
        repo = SqlAlchemyPromoCodeRepository(session)
        free = await evaluate_promo_code(repo, "free", Decimal("1000"), now=NOW)
        flat = await evaluate_promo_code(repo, "flat150", Decimal("1000"), now=NOW)
    assert free.discount_amount == Decimal("1000.00")
    assert flat.discount_amount == Decimal("150")


@pytest.mark.asyncio
async def test_code_stored_in_lowercase_is_found(session_factory) -> None:
    await add_promo(session_factory, " save10 ", DiscountType.PERCENTAGE, "10")

    async with session_factory() as session:
        stored = await session.scalar(select(PromoCode.code))
        result = await evaluate_promo_code(SqlAlchemyPromoCodeRepository(session), "save10", Decimal("1000"), now=NOW)

    assert stored == "SAVE10"
    assert result.valid is True
    assert result.discount_amount == Decimal("100.00")
