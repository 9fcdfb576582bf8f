from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from bookit.domain.repositories import ExperienceDraft, SlotDraft
from bookit.infrastructure.repositories import SqlAlchemyExperienceRepository
from bookit.models import DiscountType, PromoCode, Slot
from bookit.utils.time import utc_now_naive
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


async def add_experience(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    price: Decimal = Decimal("500"),
    total_spots: int = 1,
    booked_spots: int = 0,
) -> tuple[int, int]:
    """Insert one experience with a single slot; returns (experience_id, slot_id)."""
    draft = ExperienceDraft(
        title="Northern Lights Adventure",
        description="Aurora hunting",
        price=price,
        location="Reykjavik, Iceland",
        slots=(
            SlotDraft(
                date=date.today() + timedelta(days=10),
                start_time="19:00",
                end_time="23:30",
                total_spots=total_spots,
                booked_spots=booked_spots,
            ),
        ),
    )
    async with session_factory() as session:
        async with session.begin():
            experience = await SqlAlchemyExperienceRepository(session).create(draft)
        return experience.id, experience.slots[0].id


async def add_promo(
    session_factory: async_sessionmaker[AsyncSession],
    code: str,
    discount_type: DiscountType,
    value: str,
    *,
    is_active: bool = True,
    expires_in: Optional[timedelta] = None,
) -> None:
    now = utc_now_naive()
    async with session_factory() as session:
        async with session.begin():
            session.add(
                PromoCode(
                    code=code,
                    discount_type=discount_type,
                    discount_value=Decimal(value),
                    is_active=is_active,
                    expires_at=now + expires_in if expires_in is not None else None,
                    created_at=now,
                    updated_at=now,
                )
            )


async def read_slot(session_factory: async_sessionmaker[AsyncSession], slot_id: int) -> Slot:
    async with session_factory() as session:
        slot = await session.scalar(select(Slot).where(Slot.id == slot_id))
        assert slot is not None
        return slot


