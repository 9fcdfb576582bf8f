from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..domain.errors import CapacityInvariantError, SlotNotFoundError, SlotUnavailableError
from ..domain.repositories import (
    BookingDraft,
    BookingRepository,
    ExperienceDraft,
    ExperienceRepository,
    PromoCodeRepository,
    SlotCapacityStore,
)
from ..domain.services import generate_confirmation_number
from ..models import Booking, BookingStatus, Experience, PromoCode, Slot
from ..utils.time import utc_now_naive

logger = logging.getLogger(__name__)

CONFIRMATION_ATTEMPTS = 3


class SqlAlchemyExperienceRepository(ExperienceRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, experience_id: int) -> Experience | None:
        stmt = (
            select(Experience)
            .options(selectinload(Experience.slots))
            .where(Experience.id == experience_id)
            .execution_options(populate_existing=True)
        )
        return await self.session.scalar(stmt)

    async def list_all(self) -> list[Experience]:
        stmt = (
            select(Experience)
            .options(selectinload(Experience.slots))
            .order_by(Experience.id)
            .execution_options(populate_existing=True)
        )
        return list((await self.session.scalars(stmt)).all())

    async def create(self, draft: ExperienceDraft) -> Experience:
        now = utc_now_naive()
        experience = Experience(
            title=draft.title,
            description=draft.description,
            long_description=draft.long_description,
            image=draft.image,
            price=draft.price,
            duration=draft.duration,
            location=draft.location,
            category=draft.category,
            highlights=list(draft.highlights),
            included=list(draft.included),
            created_at=now,
            updated_at=now,
            slots=[
                Slot(
                    date=slot.date,
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    total_spots=slot.total_spots,
                    booked_spots=slot.booked_spots,
                )
                for slot in draft.slots
            ],
        )
        self.session.add(experience)
        await self.session.flush()
        return experience


class SqlAlchemySlotCapacityStore(SlotCapacityStore):
    """
    Capacity counter updates as single conditional UPDATE statements.

    The availability check lives in the WHERE clause of the same statement that
    moves the counter, so the database evaluates check and write under one row
    lock. ``rowcount`` tells whether the condition held.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_slot(self, experience_id: int, slot_id: int) -> Slot | None:
        stmt = (
            select(Slot)
            .where(Slot.id == slot_id, Slot.experience_id == experience_id)
            .execution_options(populate_existing=True)
        )
        return await self.session.scalar(stmt)

    async def try_reserve(self, experience_id: int, slot_id: int) -> None:
        stmt = (
            update(Slot)
            .where(
                Slot.id == slot_id,
                Slot.experience_id == experience_id,
                Slot.booked_spots < Slot.total_spots,
            )
            .values(booked_spots=Slot.booked_spots + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 1:
            return
        if await self.get_slot(experience_id, slot_id) is None:
            raise SlotNotFoundError("slot not found")
        raise SlotUnavailableError("selected slot is no longer available")

    async def release(self, experience_id: int, slot_id: int) -> None:
        stmt = (
            update(Slot)
            .where(
                Slot.id == slot_id,
                Slot.experience_id == experience_id,
                Slot.booked_spots > 0,
            )
            .values(booked_spots=Slot.booked_spots - 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 1:
            return
        if await self.get_slot(experience_id, slot_id) is None:
            raise SlotNotFoundError("slot not found")
        logger.error(
            "refusing to release capacity below zero",
            extra={"experience_id": experience_id, "slot_id": slot_id},
        )
        raise CapacityInvariantError("booked spots would become negative")


class SqlAlchemyBookingRepository(BookingRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def insert(self, draft: BookingDraft) -> Booking:
        last_error: IntegrityError | None = None
        for _ in range(CONFIRMATION_ATTEMPTS):
            now = utc_now_naive()
            booking = Booking(
                confirmation_number=generate_confirmation_number(now),
                experience_id=draft.experience_id,
                slot_id=draft.slot_id,
                user_name=draft.user_name,
                user_email=draft.user_email,
                original_price=draft.original_price,
                discount=draft.discount,
                final_price=draft.final_price,
                promo_code=draft.promo_code,
                status=BookingStatus.CONFIRMED,
                created_at=now,
                updated_at=now,
            )
            try:
                # Savepoint so a confirmation number collision keeps the
                # enclosing reservation intact.
                async with self.session.begin_nested():
                    self.session.add(booking)
                    await self.session.flush()
            except IntegrityError as exc:
                logger.warning("confirmation number collision, regenerating: %s", booking.confirmation_number)
                last_error = exc
                continue
            return booking
        assert last_error is not None
        raise last_error

    async def get(self, booking_id: int) -> Booking | None:
        return await self.session.get(Booking, booking_id, populate_existing=True)

    async def get_for_update(self, booking_id: int) -> Booking | None:
        stmt = (
            select(Booking)
            .where(Booking.id == booking_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return await self.session.scalar(stmt)

    async def list_by_email(self, email: str) -> list[Booking]:
        stmt = (
            select(Booking)
            .where(Booking.user_email == email)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        return list((await self.session.scalars(stmt)).all())

    async def mark_cancelled(self, booking: Booking) -> Booking:
        booking.status = BookingStatus.CANCELLED
        booking.updated_at = utc_now_naive()
        self.session.add(booking)
        await self.session.flush()
        return booking

    async def list_oldest_first(self) -> list[Booking]:
        stmt = select(Booking).order_by(Booking.created_at.asc(), Booking.id.asc())
        return list((await self.session.scalars(stmt)).all())

    async def delete(self, booking: Booking) -> None:
        await self.session.delete(booking)
        await self.session.flush()


class SqlAlchemyPromoCodeRepository(PromoCodeRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_code(self, code: str) -> PromoCode | None:
        return await self.session.scalar(select(PromoCode).where(PromoCode.code == code))
