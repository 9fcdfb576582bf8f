from fastapi import HTTPException, status

from ..domain.errors import BookingError

INTERNAL_ERROR_CODE = "internal_error"


def http_error(status_code: int, exc: BookingError) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"code": exc.code, "message": str(exc)})


def internal_error(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"code": INTERNAL_ERROR_CODE, "message": message},
    )
