from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_current_identity, get_session
from ..domain.errors import ExperienceNotFoundError, InvalidBookingInputError
from ..domain.repositories import ExperienceDraft, SlotDraft
from ..infrastructure.repositories import SqlAlchemyExperienceRepository
from ..schemas import ExperienceCreate, ExperienceRead
from ..usecases import experiences as experience_usecase
from .errors import http_error

router = APIRouter(prefix="/api/experiences", tags=["experiences"])


@router.get("", response_model=List[ExperienceRead])
async def list_experiences(session: AsyncSession = Depends(get_session)) -> list[ExperienceRead]:
    exp_repo = SqlAlchemyExperienceRepository(session)
    rows = await experience_usecase.list_experiences(exp_repo)
    return [ExperienceRead.from_db(experience=experience) for experience in rows]


@router.get("/{experience_id}", response_model=ExperienceRead)
async def get_experience(
    experience_id: int = Path(...),
    session: AsyncSession = Depends(get_session),
) -> ExperienceRead:
    exp_repo = SqlAlchemyExperienceRepository(session)
    try:
        experience = await experience_usecase.get_experience(exp_repo, experience_id=experience_id)
    except ExperienceNotFoundError as exc:
        raise http_error(status.HTTP_404_NOT_FOUND, exc)
    return ExperienceRead.from_db(experience=experience)


@router.post(
    "",
    response_model=ExperienceRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_current_identity)],
)
async def create_experience(
    payload: ExperienceCreate,
    session: AsyncSession = Depends(get_session),
) -> ExperienceRead:
    exp_repo = SqlAlchemyExperienceRepository(session)
    draft = ExperienceDraft(
        title=payload.title.strip(),
        description=payload.description.strip(),
        long_description=payload.long_description,
        image=payload.image,
        price=payload.price,
        duration=payload.duration,
        location=payload.location,
        category=payload.category,
        highlights=tuple(payload.highlights),
        included=tuple(payload.included),
        slots=tuple(
            SlotDraft(
                date=slot.date,
                start_time=slot.start_time,
                end_time=slot.end_time,
                total_spots=slot.total_spots,
            )
            for slot in payload.slots
        ),
    )
    try:
        async with session.begin():
            experience = await experience_usecase.create_experience(exp_repo, draft)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": InvalidBookingInputError.code, "message": str(exc)},
        )
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="experience conflicts with existing data")

    return ExperienceRead.from_db(experience=experience)
