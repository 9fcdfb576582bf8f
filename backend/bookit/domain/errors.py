"""Domain errors raised by the booking engine.

Every error carries a stable ``code`` so the HTTP layer can keep bad input,
unavailability and internal faults distinguishable for the client.
"""


class BookingError(Exception):
    code = "booking_error"


class InvalidBookingInputError(BookingError):
    code = "invalid_input"


class ExperienceNotFoundError(BookingError):
    code = "experience_not_found"


class SlotNotFoundError(BookingError):
    code = "slot_not_found"


class BookingNotFoundError(BookingError):
    code = "booking_not_found"


class PromoCodeNotFoundError(BookingError):
    code = "promo_not_found"


class SlotUnavailableError(BookingError):
    """The slot had no free spot left when the reservation was attempted."""

    code = "slot_unavailable"


class AlreadyCancelledError(BookingError):
    code = "already_cancelled"


class PromoCodeInvalidError(BookingError):
    """The promo code exists but is inactive or expired."""

    code = "promo_invalid"


class CapacityInvariantError(BookingError):
    """A release would push booked spots below zero; the counter has drifted."""

    code = "capacity_invariant"
