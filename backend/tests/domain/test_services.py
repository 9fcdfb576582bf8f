import re
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from bookit.domain.errors import InvalidBookingInputError
from bookit.domain.services import (
    compute_final_price,
    generate_confirmation_number,
    is_valid_clock_time,
    is_valid_email,
    to_base36,
    validate_customer,
)


def test_validate_customer_trims_name_and_normalizes_email() -> None:
    customer = validate_customer("  Ada Lovelace ", "  Ada@Example.COM ")
    assert customer.name == "Ada Lovelace"
    assert customer.email == "ada@example.com"


@pytest.mark.parametrize("name", [None, "", "   "])
def test_validate_customer_rejects_empty_name(name: str | None) -> None:
    with pytest.raises(InvalidBookingInputError):
        validate_customer(name, "ada@example.com")


def test_validate_customer_rejects_overlong_name() -> None:
    with pytest.raises(InvalidBookingInputError):
        validate_customer("x" * 101, "ada@example.com")


@pytest.mark.parametrize("email", [None, "", "ada", "ada@example", "ada @example.com", "@example.com"])
def test_validate_customer_rejects_malformed_email(email: str | None) -> None:
    with pytest.raises(InvalidBookingInputError):
        validate_customer("Ada", email)


def test_is_valid_email_accepts_simple_addresses() -> None:
    assert is_valid_email("someone@mail.example.org")
    assert not is_valid_email("someone@@example.org")


@pytest.mark.parametrize("value,expected", [("09:30", True), ("9:30", True), ("23:59", True), ("24:00", False), ("12:60", False), ("noon", False)])
def test_clock_time_format(value: str, expected: bool) -> None:
    assert is_valid_clock_time(value) is expected


def test_final_price_never_negative() -> None:
    assert compute_final_price(Decimal("500"), Decimal("50")) == Decimal("450")
    assert compute_final_price(Decimal("30"), Decimal("30")) == Decimal("0")
    assert compute_final_price(Decimal("30"), Decimal("45")) == Decimal("0")


def test_to_base36() -> None:
    assert to_base36(0) == "0"
    assert to_base36(35) == "Z"
    assert to_base36(36) == "10"
    with pytest.raises(ValueError):
        to_base36(-1)


def test_confirmation_number_format_encodes_time() -> None:
    moment = datetime(2025, 11, 15, 19, 0, tzinfo=timezone.utc)
    code = generate_confirmation_number(moment)
    assert re.fullmatch(r"BK-[0-9A-Z]+-[0-9A-Z]{6}", code)
    assert code.split("-")[1] == to_base36(int(moment.timestamp() * 1000))


def test_confirmation_number_treats_naive_time_as_utc() -> None:
    naive = datetime(2025, 11, 15, 19, 0)
    aware = naive.replace(tzinfo=timezone.utc)
    assert generate_confirmation_number(naive).split("-")[1] == generate_confirmation_number(aware).split("-")[1]


def test_confirmation_numbers_differ_between_calls() -> None:
    moment = datetime(2025, 11, 15, 19, 0, tzinfo=timezone.utc)
    codes = {generate_confirmation_number(moment) for _ in range(50)}
    assert len(codes) > 1
