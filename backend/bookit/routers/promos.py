from decimal import Decimal

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_session
from ..domain.errors import InvalidBookingInputError, PromoCodeInvalidError, PromoCodeNotFoundError
from ..infrastructure.repositories import SqlAlchemyPromoCodeRepository
from ..schemas import PromoValidate, PromoValidationRead
from ..usecases import promos as promo_usecase
from ..utils.time import utc_now_naive
from .errors import http_error

router = APIRouter(prefix="/api/promo", tags=["promo"])


@router.post("/validate", response_model=PromoValidationRead)
async def validate_promo(
    payload: PromoValidate,
    session: AsyncSession = Depends(get_session),
) -> PromoValidationRead:
    promo_repo = SqlAlchemyPromoCodeRepository(session)
    try:
        quote = await promo_usecase.quote_promo_code(
            promo_repo,
            code=payload.code,
            original_price=Decimal(str(payload.original_price)),
            now=utc_now_naive(),
        )
    except (InvalidBookingInputError, PromoCodeNotFoundError, PromoCodeInvalidError) as exc:
        raise http_error(status.HTTP_400_BAD_REQUEST, exc)
    return PromoValidationRead.from_quote(quote)
