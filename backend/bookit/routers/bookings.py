import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_current_identity, get_session
from ..domain.errors import (
    AlreadyCancelledError,
    BookingNotFoundError,
    CapacityInvariantError,
    ExperienceNotFoundError,
    InvalidBookingInputError,
    SlotNotFoundError,
    SlotUnavailableError,
)
from ..infrastructure.repositories import SqlAlchemyBookingRepository
from ..infrastructure.unit_of_work import SqlAlchemyUnitOfWork
from ..schemas import BookingCreate, BookingCreated, BookingRead
from ..usecases import bookings as booking_usecase
from ..utils.auth import Identity
from .errors import http_error, internal_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["bookings"])


@router.post("/bookings", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreate,
    session: AsyncSession = Depends(get_session),
) -> BookingCreated:
    try:
        async with SqlAlchemyUnitOfWork(session) as uow:
            booking = await booking_usecase.create_booking(
                uow,
                experience_id=payload.experience_id,
                slot_id=payload.slot_id,
                user_name=payload.user_name,
                user_email=payload.user_email,
                promo_code=payload.promo_code,
            )
    except InvalidBookingInputError as exc:
        raise http_error(status.HTTP_400_BAD_REQUEST, exc)
    except (ExperienceNotFoundError, SlotNotFoundError) as exc:
        raise http_error(status.HTTP_404_NOT_FOUND, exc)
    except SlotUnavailableError as exc:
        raise http_error(status.HTTP_400_BAD_REQUEST, exc)
    except (CapacityInvariantError, SQLAlchemyError, RuntimeError) as exc:
        logger.exception("create booking failed")
        raise internal_error("failed to create booking") from exc

    return BookingCreated(
        confirmation_number=booking.confirmation_number,
        booking=BookingRead.from_db(booking=booking),
    )


@router.get("/bookings", response_model=List[BookingRead])
async def list_bookings(
    email: Optional[str] = Query(default=None, description="Customer email"),
    session: AsyncSession = Depends(get_session),
) -> list[BookingRead]:
    res_repo = SqlAlchemyBookingRepository(session)
    try:
        rows = await booking_usecase.list_bookings_by_email(res_repo, email=email)
    except InvalidBookingInputError as exc:
        raise http_error(status.HTTP_400_BAD_REQUEST, exc)
    return [BookingRead.from_db(booking=booking) for booking in rows]


@router.get("/me/bookings", response_model=List[BookingRead])
async def list_my_bookings(
    session: AsyncSession = Depends(get_session),
    identity: Identity = Depends(get_current_identity),
) -> list[BookingRead]:
    res_repo = SqlAlchemyBookingRepository(session)
    try:
        rows = await booking_usecase.list_bookings_by_email(res_repo, email=identity.email)
    except InvalidBookingInputError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="token carries no usable email") from exc
    return [BookingRead.from_db(booking=booking) for booking in rows]


@router.get("/bookings/{booking_id}", response_model=BookingRead)
async def get_booking(
    booking_id: int = Path(...),
    session: AsyncSession = Depends(get_session),
) -> BookingRead:
    res_repo = SqlAlchemyBookingRepository(session)
    try:
        booking = await booking_usecase.get_booking(res_repo, booking_id=booking_id)
    except BookingNotFoundError as exc:
        raise http_error(status.HTTP_404_NOT_FOUND, exc)
    return BookingRead.from_db(booking=booking)


@router.patch("/bookings/{booking_id}/cancel", response_model=BookingRead)
async def cancel_booking(
    booking_id: int = Path(...),
    session: AsyncSession = Depends(get_session),
) -> BookingRead:
    try:
        async with SqlAlchemyUnitOfWork(session) as uow:
            updated = await booking_usecase.cancel_booking(uow, booking_id=booking_id)
    except (BookingNotFoundError, SlotNotFoundError) as exc:
        raise http_error(status.HTTP_404_NOT_FOUND, exc)
    except AlreadyCancelledError as exc:
        raise http_error(status.HTTP_400_BAD_REQUEST, exc)
    except (CapacityInvariantError, SQLAlchemyError, RuntimeError) as exc:
        logger.exception("cancel booking %s failed", booking_id)
        raise internal_error("failed to cancel booking") from exc

    return BookingRead.from_db(booking=updated)
