from __future__ import annotations

import logging
from types import TracebackType

from sqlalchemy.ext.asyncio import AsyncSession

from .repositories import (
    SqlAlchemyBookingRepository,
    SqlAlchemyExperienceRepository,
    SqlAlchemyPromoCodeRepository,
    SqlAlchemySlotCapacityStore,
)

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork:
    """
    One atomic scope over an AsyncSession.

    All stores share the session, so capacity counters and booking records
    commit or roll back together. Leaving the block without calling
    ``commit()`` (or with an exception) rolls the whole scope back.

    Usage:
        async with SqlAlchemyUnitOfWork(session) as uow:
            await uow.slots.try_reserve(experience_id, slot_id)
            await uow.bookings.insert(draft)
            await uow.commit()
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.experiences = SqlAlchemyExperienceRepository(session)
        self.slots = SqlAlchemySlotCapacityStore(session)
        self.bookings = SqlAlchemyBookingRepository(session)
        self.promos = SqlAlchemyPromoCodeRepository(session)
        self._committed = False

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self._committed = False
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            logger.info("rolling back unit of work after %s", exc_type.__name__)
            await self.rollback()
        elif not self._committed:
            await self.rollback()

    async def commit(self) -> None:
        await self.session.commit()
        self._committed = True

    async def rollback(self) -> None:
        await self.session.rollback()
