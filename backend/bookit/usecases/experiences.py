from decimal import Decimal

from ..domain.errors import ExperienceNotFoundError
from ..domain.repositories import ExperienceDraft, ExperienceRepository
from ..domain.services import is_valid_clock_time
from ..models import Experience


async def list_experiences(exp_repo: ExperienceRepository) -> list[Experience]:
    return await exp_repo.list_all()


async def get_experience(exp_repo: ExperienceRepository, *, experience_id: int) -> Experience:
    experience = await exp_repo.get(experience_id)
    if experience is None:
        raise ExperienceNotFoundError("experience not found")
    return experience


async def create_experience(exp_repo: ExperienceRepository, draft: ExperienceDraft) -> Experience:
    if not draft.title.strip():
        raise ValueError("title must not be empty")
    if not draft.description.strip():
        raise ValueError("description must not be empty")
    if draft.price < Decimal("0"):
        raise ValueError("price cannot be negative")
    for slot in draft.slots:
        if not is_valid_clock_time(slot.start_time):
            raise ValueError("start time must be in HH:MM format")
        if not is_valid_clock_time(slot.end_time):
            raise ValueError("end time must be in HH:MM format")
        if slot.total_spots < 1:
            raise ValueError("total spots must be >= 1")
        if not 0 <= slot.booked_spots <= slot.total_spots:
            raise ValueError("booked spots must be between 0 and total spots")
    return await exp_repo.create(draft)
