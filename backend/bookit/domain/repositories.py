from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Protocol, Sequence

from ..models import Booking, Experience, PromoCode, Slot


@dataclass(frozen=True)
class SlotDraft:
    date: date
    start_time: str
    end_time: str
    total_spots: int
    booked_spots: int = 0


@dataclass(frozen=True)
class ExperienceDraft:
    title: str
    description: str
    price: Decimal
    long_description: str = ""
    image: str = ""
    duration: str = ""
    location: str = ""
    category: str = ""
    highlights: Sequence[str] = field(default_factory=tuple)
    included: Sequence[str] = field(default_factory=tuple)
    slots: Sequence[SlotDraft] = field(default_factory=tuple)


@dataclass(frozen=True)
class BookingDraft:
    experience_id: int
    slot_id: int
    user_name: str
    user_email: str
    original_price: Decimal
    discount: Decimal
    final_price: Decimal
    promo_code: str | None


class ExperienceRepository(Protocol):
    async def get(self, experience_id: int) -> Experience | None: ...

    async def list_all(self) -> list[Experience]: ...

    async def create(self, draft: ExperienceDraft) -> Experience: ...


class SlotCapacityStore(Protocol):
    """Sole writer of ``Slot.booked_spots``."""

    async def get_slot(self, experience_id: int, slot_id: int) -> Slot | None: ...

    async def try_reserve(self, experience_id: int, slot_id: int) -> None: ...

    async def release(self, experience_id: int, slot_id: int) -> None: ...


class BookingRepository(Protocol):
    async def insert(self, draft: BookingDraft) -> Booking: ...

    async def get(self, booking_id: int) -> Booking | None: ...

    async def get_for_update(self, booking_id: int) -> Booking | None: ...

    async def list_by_email(self, email: str) -> list[Booking]: ...

    async def mark_cancelled(self, booking: Booking) -> Booking: ...

    async def list_oldest_first(self) -> list[Booking]: ...

    async def delete(self, booking: Booking) -> None: ...


class PromoCodeRepository(Protocol):
    async def get_by_code(self, code: str) -> PromoCode | None: ...


class UnitOfWork(Protocol):
    experiences: ExperienceRepository
    slots: SlotCapacityStore
    bookings: BookingRepository
    promos: PromoCodeRepository

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...
