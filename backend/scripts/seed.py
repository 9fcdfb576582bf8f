#!/usr/bin/env python3
"""
Create the tables and load demo experiences, slots and promo codes.

  python backend/scripts/seed.py            # add demo data
  python backend/scripts/seed.py --reset    # drop everything first
"""
import argparse
import asyncio
import sys
from datetime import date, timedelta
from decimal import Decimal

from bookit.database import async_session, create_tables, engine
from bookit.domain.repositories import ExperienceDraft, SlotDraft
from bookit.infrastructure.repositories import SqlAlchemyExperienceRepository
from bookit.models import Base, DiscountType, PromoCode
from bookit.usecases.experiences import create_experience
from bookit.utils.time import utc_now_naive


def _slots(first_day: date, times: list[tuple[str, str]], total: int, booked: list[int]) -> list[SlotDraft]:
    drafts = []
    for day_offset in range(2):
        day = first_day + timedelta(days=day_offset)
        for (start, end), already_booked in zip(times, booked):
            drafts.append(
                SlotDraft(date=day, start_time=start, end_time=end, total_spots=total, booked_spots=already_booked)
            )
    return drafts


def demo_experiences(first_day: date) -> list[ExperienceDraft]:
    return [
        ExperienceDraft(
            title="Northern Lights Adventure in Iceland",
            description="Witness the Aurora Borealis dancing across the Arctic sky.",
            long_description="A guided night tour away from city lights to the best aurora viewing spots.",
            image="https://images.unsplash.com/photo-1579033461380-adb47c3eb938?w=800&q=80",
            price=Decimal("189"),
            duration="5 hours",
            location="Reykjavik, Iceland",
            category="Nature & Wildlife",
            highlights=[
                "Expert guide with aurora forecast knowledge",
                "Several viewing locations for the best chances",
                "Photography assistance and tips",
            ],
            included=["Hotel pickup and drop-off", "Warm overalls and blankets", "Hot beverages and snacks"],
            slots=_slots(first_day, [("19:00", "00:00"), ("20:00", "01:00"), ("21:00", "02:00")], 12, [8, 0, 12]),
        ),
        ExperienceDraft(
            title="Coffee Plantation Trail in Coorg",
            description="Walk through misty estates and learn how coffee goes from cherry to cup.",
            long_description="Half-day estate walk with a tasting session led by a planter.",
            image="https://images.unsplash.com/photo-1447933601403-0c6688de566e?w=800&q=80",
            price=Decimal("45"),
            duration="4 hours",
            location="Coorg, Karnataka, India",
            category="Food & Drink",
            highlights=["Walk through shade-grown arabica estates", "Tasting session with a planter"],
            included=["Estate guide", "Coffee tasting", "Light breakfast"],
            slots=_slots(first_day, [("07:00", "11:00"), ("14:00", "18:00")], 8, [3, 7]),
        ),
        ExperienceDraft(
            title="Sunderban Mangrove Boat Safari",
            description="Cruise the tidal channels of the largest mangrove forest in the world.",
            long_description="Full-day boat safari with a naturalist, lunch on board included.",
            image="https://images.unsplash.com/photo-1500530855697-b586d89ba3ee?w=800&q=80",
            price=Decimal("30"),
            duration="8 hours",
            location="Sunderban, India",
            category="Adventure",
            highlights=["Naturalist-led channel cruise", "Watchtower stops for wildlife spotting"],
            included=["Boat safari", "Lunch on board", "Forest permits"],
            slots=_slots(first_day, [("06:30", "14:30")], 1, [0]),
        ),
    ]


def demo_promo_codes() -> list[PromoCode]:
    now = utc_now_naive()
    rows = [
        ("SAVE10", DiscountType.PERCENTAGE, Decimal("10"), True, None),
        ("SAVE20", DiscountType.PERCENTAGE, Decimal("20"), True, now + timedelta(days=90)),
        ("FLAT50", DiscountType.FIXED, Decimal("50"), True, None),
        ("RETIRED", DiscountType.PERCENTAGE, Decimal("30"), False, None),
        ("SUMMER", DiscountType.FIXED, Decimal("25"), True, now - timedelta(days=1)),
    ]
    return [
        PromoCode(
            code=code,
            discount_type=discount_type,
            discount_value=value,
            is_active=active,
            expires_at=expires_at,
            created_at=now,
            updated_at=now,
        )
        for code, discount_type, value, active, expires_at in rows
    ]


async def seed(reset: bool) -> None:
    if reset:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
    await create_tables(engine)

    async with async_session() as session:
        async with session.begin():
            exp_repo = SqlAlchemyExperienceRepository(session)
            for draft in demo_experiences(date.today() + timedelta(days=7)):
                experience = await create_experience(exp_repo, draft)
                print(f"  experience #{experience.id}: {experience.title} ({len(experience.slots)} slots)")
            session.add_all(demo_promo_codes())
    await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--reset", action="store_true", help="drop all tables before seeding")
    args = parser.parse_args()
    print("Seeding database ...")
    try:
        asyncio.run(seed(args.reset))
    except Exception as e:
        print(f"Error while seeding: {e}", file=sys.stderr)
        sys.exit(1)
    print("Done.")


if __name__ == "__main__":
    main()
