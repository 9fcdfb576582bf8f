"""Offline data hygiene, never called from the booking path."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..domain.repositories import UnitOfWork
from ..models import Booking, BookingStatus
from ..utils.audit_log import emit_audit_log

logger = logging.getLogger(__name__)


@dataclass
class PurgeReport:
    scanned: int = 0
    deleted: list[str] = field(default_factory=list)
    released: int = 0


def _duplicate_key(booking: Booking) -> tuple[str, int, int]:
    return booking.user_email, booking.experience_id, booking.slot_id


def find_duplicate_bookings(bookings: list[Booking]) -> list[Booking]:
    """Everything after the first booking per (email, experience, slot); input must be oldest first."""
    seen: set[tuple[str, int, int]] = set()
    duplicates: list[Booking] = []
    for booking in bookings:
        key = _duplicate_key(booking)
        if key in seen:
            duplicates.append(booking)
        else:
            seen.add(key)
    return duplicates


async def purge_duplicate_bookings(uow: UnitOfWork, *, dry_run: bool = False) -> PurgeReport:
    """
    Delete duplicate bookings, keeping the oldest of each (email, experience, slot).

    A deleted booking that was still confirmed held one spot of its slot, so the
    spot is released in the same transaction to keep the counter equal to the
    number of live bookings.
    """
    bookings = await uow.bookings.list_oldest_first()
    report = PurgeReport(scanned=len(bookings))
    duplicates = find_duplicate_bookings(bookings)
    if dry_run:
        report.deleted = [b.confirmation_number for b in duplicates]
        return report

    for booking in duplicates:
        if booking.status == BookingStatus.CONFIRMED:
            await uow.slots.release(booking.experience_id, booking.slot_id)
            report.released += 1
        emit_audit_log(
            action="booking.purged",
            initiator="system",
            booking_id=booking.id,
            confirmation_number=booking.confirmation_number,
            experience_id=booking.experience_id,
            slot_id=booking.slot_id,
            user_email=booking.user_email,
            final_price=booking.final_price,
            status_from=booking.status,
            status_to=None,
            message="duplicate booking removed",
        )
        await uow.bookings.delete(booking)
        report.deleted.append(booking.confirmation_number)

    await uow.commit()
    logger.info("purged %d duplicate bookings (%d spots released)", len(report.deleted), report.released)
    return report
