from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from .models import Booking, BookingStatus, DiscountType, Experience, Slot
from .usecases.promos import PromoQuote
from .utils.time import utc_naive_to_aware


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SlotRead(CamelModel):
    id: int
    date: date
    start_time: str
    end_time: str
    total_spots: int
    booked_spots: int
    available_spots: int
    is_sold_out: bool

    @classmethod
    def from_db(cls, *, slot: Slot) -> "SlotRead":
        return cls(
            id=slot.id,
            date=slot.date,
            start_time=slot.start_time,
            end_time=slot.end_time,
            total_spots=slot.total_spots,
            booked_spots=slot.booked_spots,
            available_spots=slot.available_spots,
            is_sold_out=slot.is_sold_out,
        )


class ExperienceRead(CamelModel):
    id: int
    title: str
    description: str
    long_description: str
    image: str
    price: Decimal
    duration: str
    location: str
    category: str
    highlights: list[str]
    included: list[str]
    slots: list[SlotRead]

    @field_serializer("price")
    def _ser_money(self, value: Decimal) -> float:
        return float(value)

    @classmethod
    def from_db(cls, *, experience: Experience) -> "ExperienceRead":
        return cls(
            id=experience.id,
            title=experience.title,
            description=experience.description,
            long_description=experience.long_description,
            image=experience.image,
            price=experience.price,
            duration=experience.duration,
            location=experience.location,
            category=experience.category,
            highlights=list(experience.highlights or []),
            included=list(experience.included or []),
            slots=[SlotRead.from_db(slot=slot) for slot in experience.slots],
        )


class SlotCreate(CamelModel):
    date: date
    start_time: str
    end_time: str
    total_spots: int = Field(ge=1)


class ExperienceCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=500)
    long_description: str = ""
    image: str = ""
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    duration: str = ""
    location: str = ""
    category: str = ""
    highlights: list[str] = Field(default_factory=list)
    included: list[str] = Field(default_factory=list)
    slots: list[SlotCreate] = Field(default_factory=list)


class BookingCreate(CamelModel):
    experience_id: int
    slot_id: int
    user_name: str
    user_email: str
    promo_code: Optional[str] = None


class BookingRead(CamelModel):
    id: int
    confirmation_number: str
    experience_id: int
    slot_id: int
    user_name: str
    user_email: str
    original_price: Decimal
    discount: Decimal
    final_price: Decimal
    promo_code: Optional[str]
    status: BookingStatus
    created_at: datetime
    updated_at: datetime

    @field_serializer("original_price", "discount", "final_price")
    def _ser_money(self, value: Decimal) -> float:
        return float(value)

    @field_serializer("created_at", "updated_at")
    def _ser_datetime(self, dt: datetime) -> str:
        return utc_naive_to_aware(dt).isoformat()

    @classmethod
    def from_db(cls, *, booking: Booking) -> "BookingRead":
        return cls(
            id=booking.id,
            confirmation_number=booking.confirmation_number,
            experience_id=booking.experience_id,
            slot_id=booking.slot_id,
            user_name=booking.user_name,
            user_email=booking.user_email,
            original_price=booking.original_price,
            discount=booking.discount,
            final_price=booking.final_price,
            promo_code=booking.promo_code,
            status=booking.status,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )


class BookingCreated(CamelModel):
    confirmation_number: str
    booking: BookingRead


class PromoValidate(CamelModel):
    code: str = Field(min_length=1, max_length=50)
    original_price: float = Field(gt=0, allow_inf_nan=False)


class PromoValidationRead(CamelModel):
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    discount_amount: Decimal

    @field_serializer("discount_value", "discount_amount")
    def _ser_money(self, value: Decimal) -> float:
        return float(value)

    @classmethod
    def from_quote(cls, quote: PromoQuote) -> "PromoValidationRead":
        return cls(
            code=quote.code,
            discount_type=quote.discount_type,
            discount_value=quote.discount_value,
            discount_amount=quote.discount_amount,
        )
