import re
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from .errors import InvalidBookingInputError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
CLOCK_TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")
MAX_NAME_LENGTH = 100
CONFIRMATION_PREFIX = "BK"

_BASE36_ALPHABET = string.digits + string.ascii_uppercase


@dataclass(frozen=True)
class CustomerDetails:
    name: str
    email: str


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    return EMAIL_RE.match(email.strip()) is not None


def is_valid_clock_time(value: str) -> bool:
    return CLOCK_TIME_RE.match(value) is not None


def validate_customer(name: str | None, email: str | None) -> CustomerDetails:
    """
    Pure validation of the customer fields of a booking request.
    Returns the trimmed name and normalized email, raises InvalidBookingInputError otherwise.
    """
    if not name or not name.strip():
        raise InvalidBookingInputError("user name cannot be empty")
    if len(name.strip()) > MAX_NAME_LENGTH:
        raise InvalidBookingInputError(f"user name cannot exceed {MAX_NAME_LENGTH} characters")
    if not email or not is_valid_email(email):
        raise InvalidBookingInputError("please provide a valid email address")
    return CustomerDetails(name=name.strip(), email=normalize_email(email))


def compute_final_price(original_price: Decimal, discount: Decimal) -> Decimal:
    return max(Decimal("0"), original_price - discount)


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_confirmation_number(now: datetime | None = None) -> str:
    """Display token: BK-<base36 epoch millis>-<6 random base36 chars>."""
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    millis = int(moment.timestamp() * 1000)
    suffix = "".join(secrets.choice(_BASE36_ALPHABET) for _ in range(6))
    return f"{CONFIRMATION_PREFIX}-{to_base36(millis)}-{suffix}"
