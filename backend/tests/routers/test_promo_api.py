from datetime import timedelta

import pytest
from bookit.models import DiscountType
from helpers import add_promo


@pytest.mark.asyncio
async def test_validate_percentage_promo(client, session_factory) -> None:
    await add_promo(session_factory, "SAVE10", DiscountType.PERCENTAGE, "10")

    res = await client.post("/api/promo/validate", json={"code": " save10 ", "originalPrice": 1000})

    assert res.status_code == 200
    assert res.json() == {
        "code": "SAVE10",
        "discountType": "percentage",
        "discountValue": 10.0,
        "discountAmount": 100.0,
    }


@pytest.mark.asyncio
async def test_validate_fixed_promo_is_clamped(client, session_factory) -> None:
    await add_promo(session_factory, "FLAT50", DiscountType.FIXED, "50")

    res = await client.post("/api/promo/validate", json={"code": "FLAT50", "originalPrice": 30})

    assert res.status_code == 200
    assert res.json()["discountAmount"] == 30.0


@pytest.mark.asyncio
async def test_validate_unknown_promo(client) -> None:
    res = await client.post("/api/promo/validate", json={"code": "NOPE", "originalPrice": 100})
    assert res.status_code == 400
    assert res.json()["detail"] == {"code": "promo_not_found", "message": "invalid promo code"}


@pytest.mark.asyncio
async def test_validate_inactive_and_expired_promos(client, session_factory) -> None:
    await add_promo(session_factory, "RETIRED", DiscountType.PERCENTAGE, "30", is_active=False)
    await add_promo(session_factory, "SUMMER", DiscountType.PERCENTAGE, "20", expires_in=timedelta(hours=-1))

    for code in ("RETIRED", "SUMMER"):
        res = await client.post("/api/promo/validate", json={"code": code, "originalPrice": 100})
        assert res.status_code == 400
        assert res.json()["detail"]["code"] == "promo_invalid"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"code": "SAVE10", "originalPrice": 0},
        {"code": "SAVE10", "originalPrice": -10},
        {"code": "", "originalPrice": 100},
        {"code": "SAVE10"},
    ],
)
async def test_validate_rejects_bad_input(client, body) -> None:
    res = await client.post("/api/promo/validate", json=body)
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "invalid_input"


@pytest.mark.asyncio
async def test_validate_blank_code_after_trim(client) -> None:
    res = await client.post("/api/promo/validate", json={"code": "   ", "originalPrice": 100})
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "invalid_input"
