from __future__ import annotations

from datetime import date as calendar_date
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Optional

from sqlalchemy import CheckConstraint, Enum, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship, validates
from sqlalchemy.sql.sqltypes import JSON, BigInteger, Boolean, Date, DateTime, Integer, Numeric, String, Text

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
BigIntPK = BigInteger().with_variant(Integer, "sqlite")
Money = Numeric(10, 2, asdecimal=True)


class Base(DeclarativeBase):
    pass


class DiscountType(StrEnum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class BookingStatus(StrEnum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


def normalize_promo_code(code: str) -> str:
    return code.strip().upper()


def _str_enum(enum_cls: type[StrEnum]) -> Enum:
    return Enum(
        enum_cls,
        values_callable=lambda cls: [e.value for e in cls],
        native_enum=False,
    )


class Experience(Base):
    __tablename__ = "experiences"
    __table_args__ = (
        CheckConstraint("price >= 0", name="chk_experiences_price"),
        Index("idx_experiences_category", "category"),
        Index("idx_experiences_location", "location"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    long_description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    duration: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    location: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    highlights: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    included: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)

    slots: Mapped[list["Slot"]] = relationship(
        back_populates="experience",
        order_by=lambda: [Slot.date, Slot.start_time, Slot.id],
        cascade="all, delete-orphan",
    )


class Slot(Base):
    __tablename__ = "slots"
    __table_args__ = (
        CheckConstraint("total_spots >= 1", name="chk_slots_total"),
        CheckConstraint("booked_spots >= 0", name="chk_slots_booked_non_negative"),
        CheckConstraint("booked_spots <= total_spots", name="chk_slots_booked_le_total"),
        Index("idx_slots_experience", "experience_id"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    experience_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("experiences.id"), nullable=False)
    date: Mapped[calendar_date] = mapped_column(Date, nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    total_spots: Mapped[int] = mapped_column(Integer, nullable=False)
    booked_spots: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    experience: Mapped["Experience"] = relationship(back_populates="slots")

    # Derived, never persisted.
    @property
    def available_spots(self) -> int:
        return self.total_spots - self.booked_spots

    @property
    def is_sold_out(self) -> bool:
        return self.booked_spots >= self.total_spots


class PromoCode(Base):
    __tablename__ = "promo_codes"
    __table_args__ = (
        UniqueConstraint("code", name="uq_promo_codes_code"),
        CheckConstraint("discount_value >= 0", name="chk_promo_value"),
        CheckConstraint(
            "discount_type != 'percentage' OR discount_value <= 100",
            name="chk_promo_percentage",
        ),
        Index("idx_promo_codes_active", "is_active"),
        Index("idx_promo_codes_expires", "expires_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    discount_type: Mapped[DiscountType] = mapped_column(_str_enum(DiscountType), nullable=False)
    discount_value: Mapped[Decimal] = mapped_column(Money, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=False), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)

    @validates("code")
    def _normalize_code(self, key: str, value: str) -> str:
        return normalize_promo_code(value)


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        UniqueConstraint("confirmation_number", name="uq_bookings_confirmation"),
        CheckConstraint("original_price >= 0", name="chk_bookings_original_price"),
        CheckConstraint("discount >= 0", name="chk_bookings_discount"),
        CheckConstraint("final_price >= 0", name="chk_bookings_final_price"),
        Index("idx_bookings_email", "user_email"),
        Index("idx_bookings_experience", "experience_id"),
        Index("idx_bookings_created", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    confirmation_number: Mapped[str] = mapped_column(String(40), nullable=False)
    experience_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("experiences.id"), nullable=False)
    slot_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("slots.id"), nullable=False)
    user_name: Mapped[str] = mapped_column(String(100), nullable=False)
    user_email: Mapped[str] = mapped_column(String(255), nullable=False)
    original_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    discount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    final_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    promo_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    status: Mapped[BookingStatus] = mapped_column(
        _str_enum(BookingStatus),
        nullable=False,
        default=BookingStatus.CONFIRMED,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
