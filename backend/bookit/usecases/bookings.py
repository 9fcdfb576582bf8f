"""Booking transaction orchestration.

A booking attempt moves through VALIDATING -> RESERVING -> PRICING ->
PERSISTING -> COMMITTED. Any failure before the commit leaves the attempt
ROLLED_BACK: the unit of work is exited without a commit, which undoes the
capacity reservation together with anything else written in the scope.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from ..domain.errors import (
    AlreadyCancelledError,
    BookingNotFoundError,
    ExperienceNotFoundError,
    InvalidBookingInputError,
    SlotNotFoundError,
)
from ..domain.pricing import normalize_promo_code
from ..domain.repositories import BookingDraft, BookingRepository, UnitOfWork
from ..domain.services import compute_final_price, is_valid_email, normalize_email, validate_customer
from ..models import Booking, BookingStatus
from ..utils.audit_log import emit_audit_log
from ..utils.time import utc_now_naive
from .promos import evaluate_promo_code

logger = logging.getLogger(__name__)


class AttemptState(StrEnum):
    VALIDATING = "validating"
    RESERVING = "reserving"
    PRICING = "pricing"
    PERSISTING = "persisting"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class BookingAttempt:
    experience_id: int
    slot_id: int
    state: AttemptState = AttemptState.VALIDATING
    history: list[AttemptState] = field(default_factory=lambda: [AttemptState.VALIDATING])

    def advance(self, state: AttemptState) -> None:
        logger.debug(
            "booking attempt %s -> %s (experience=%s slot=%s)",
            self.state,
            state,
            self.experience_id,
            self.slot_id,
        )
        self.state = state
        self.history.append(state)


async def create_booking(
    uow: UnitOfWork,
    *,
    experience_id: int,
    slot_id: int,
    user_name: str | None,
    user_email: str | None,
    promo_code: str | None = None,
    now: datetime | None = None,
    attempt: BookingAttempt | None = None,
) -> Booking:
    attempt = attempt or BookingAttempt(experience_id=experience_id, slot_id=slot_id)
    try:
        booking = await _run_create(
            uow,
            attempt,
            user_name=user_name,
            user_email=user_email,
            promo_code=promo_code,
            now=now or utc_now_naive(),
        )
    except Exception as exc:
        logger.info("booking attempt rolled back during %s: %s", attempt.state, exc)
        attempt.advance(AttemptState.ROLLED_BACK)
        raise
    return booking


async def _run_create(
    uow: UnitOfWork,
    attempt: BookingAttempt,
    *,
    user_name: str | None,
    user_email: str | None,
    promo_code: str | None,
    now: datetime,
) -> Booking:
    if attempt.experience_id < 1:
        raise ExperienceNotFoundError("experience not found")
    if attempt.slot_id < 1:
        raise SlotNotFoundError("slot not found")
    customer = validate_customer(user_name, user_email)

    experience = await uow.experiences.get(attempt.experience_id)
    if experience is None:
        raise ExperienceNotFoundError("experience not found")
    slot = await uow.slots.get_slot(attempt.experience_id, attempt.slot_id)
    if slot is None:
        raise SlotNotFoundError("slot not found")

    attempt.advance(AttemptState.RESERVING)
    await uow.slots.try_reserve(attempt.experience_id, attempt.slot_id)

    attempt.advance(AttemptState.PRICING)
    original_price = Decimal(experience.price)
    discount = Decimal("0")
    applied_code: str | None = None
    if promo_code and promo_code.strip() and original_price > 0:
        code = normalize_promo_code(promo_code)
        evaluation = await evaluate_promo_code(uow.promos, code, original_price, now=now)
        if evaluation.valid:
            discount = evaluation.discount_amount
            applied_code = code
        else:
            logger.info("ignoring unusable promo code %s at checkout", code)
    final_price = compute_final_price(original_price, discount)

    attempt.advance(AttemptState.PERSISTING)
    booking = await uow.bookings.insert(
        BookingDraft(
            experience_id=attempt.experience_id,
            slot_id=attempt.slot_id,
            user_name=customer.name,
            user_email=customer.email,
            original_price=original_price,
            discount=discount,
            final_price=final_price,
            promo_code=applied_code,
        )
    )
    emit_audit_log(
        action="booking.created",
        initiator="customer",
        booking_id=booking.id,
        confirmation_number=booking.confirmation_number,
        experience_id=booking.experience_id,
        slot_id=booking.slot_id,
        user_email=booking.user_email,
        final_price=booking.final_price,
        status_from=None,
        status_to=booking.status,
        extra={"promo_code": applied_code, "discount": discount},
    )
    await uow.commit()
    attempt.advance(AttemptState.COMMITTED)
    return booking


async def cancel_booking(uow: UnitOfWork, *, booking_id: int) -> Booking:
    """Mark a confirmed booking cancelled and hand its spot back, atomically."""
    booking = await uow.bookings.get_for_update(booking_id)
    if booking is None:
        raise BookingNotFoundError("booking not found")
    if booking.status == BookingStatus.CANCELLED:
        raise AlreadyCancelledError("booking is already cancelled")

    status_from = booking.status
    updated = await uow.bookings.mark_cancelled(booking)
    await uow.slots.release(updated.experience_id, updated.slot_id)
    emit_audit_log(
        action="booking.cancelled",
        initiator="customer",
        booking_id=updated.id,
        confirmation_number=updated.confirmation_number,
        experience_id=updated.experience_id,
        slot_id=updated.slot_id,
        user_email=updated.user_email,
        final_price=updated.final_price,
        status_from=status_from,
        status_to=updated.status,
    )
    await uow.commit()
    return updated


async def list_bookings_by_email(res_repo: BookingRepository, *, email: str | None) -> list[Booking]:
    if not email or not is_valid_email(email):
        raise InvalidBookingInputError("please provide a valid email address")
    return await res_repo.list_by_email(normalize_email(email))


async def get_booking(res_repo: BookingRepository, *, booking_id: int) -> Booking:
    booking = await res_repo.get(booking_id)
    if booking is None:
        raise BookingNotFoundError("booking not found")
    return booking
