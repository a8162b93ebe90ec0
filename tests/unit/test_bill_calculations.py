"""Unit tests for the bill pricing stages and pipeline."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from app.services.bill_calculations import (
    RMV_CHARGE_CASH,
    RMV_CHARGE_LEASING,
    PricingPipeline,
    apply_vehicle_type_flags,
    build_pricing_pipeline,
    compute_rmv,
    compute_totals,
    restrict_special_vehicle_bill_type,
)


@pytest.mark.asyncio
async def test_first_tricycle_sale_flagged():
    claim = AsyncMock(return_value=True)
    out = await apply_vehicle_type_flags({"vehicleType": "E-TRICYCLE"}, claim)
    assert out["isTricycle"] is True
    assert out["isEbicycle"] is False
    assert out["isFirstTricycleSale"] is True
    claim.assert_awaited_once()


@pytest.mark.asyncio
async def test_later_tricycle_sale_not_flagged():
    claim = AsyncMock(return_value=False)
    out = await apply_vehicle_type_flags({"vehicleType": "E-TRICYCLE"}, claim)
    assert out["isTricycle"] is True
    assert "isFirstTricycleSale" not in out


@pytest.mark.asyncio
async def test_existing_tricycle_bill_does_not_claim_again():
    claim = AsyncMock(return_value=True)
    out = await apply_vehicle_type_flags({"vehicleType": "E-TRICYCLE", "isTricycle": True}, claim)
    assert out["isTricycle"] is True
    claim.assert_not_awaited()


@pytest.mark.asyncio
async def test_non_tricycle_never_claims():
    claim = AsyncMock(return_value=True)
    out = await apply_vehicle_type_flags({"vehicleType": "E-MOTORBICYCLE"}, claim)
    assert out["isEbicycle"] is True
    assert out["isTricycle"] is False
    claim.assert_not_awaited()


@pytest.mark.asyncio
async def test_switching_away_from_tricycle_clears_flag():
    claim = AsyncMock(return_value=True)
    out = await apply_vehicle_type_flags(
        {"vehicleType": "E-MOTORCYCLE", "isTricycle": True, "isFirstTricycleSale": True}, claim
    )
    assert out["isTricycle"] is False
    assert out["isEbicycle"] is False
    assert out["isFirstTricycleSale"] is False
    claim.assert_not_awaited()


@pytest.mark.asyncio
async def test_claim_failure_propagates():
    claim = AsyncMock(side_effect=RuntimeError("counter unavailable"))
    with pytest.raises(RuntimeError, match="counter unavailable"):
        await apply_vehicle_type_flags({"vehicleType": "E-TRICYCLE"}, claim)


def test_special_vehicles_forced_to_cash():
    assert restrict_special_vehicle_bill_type({"billType": "leasing", "isTricycle": True})["billType"] == "cash"
    assert restrict_special_vehicle_bill_type({"billType": "advance", "isEbicycle": True})["billType"] == "cash"
    assert restrict_special_vehicle_bill_type({"billType": "leasing"})["billType"] == "leasing"


@pytest.mark.parametrize("bill_type", ["cash", "leasing", "advance"])
@pytest.mark.parametrize("flag", ["isTricycle", "isEbicycle"])
def test_rmv_waived_for_special_vehicles(bill_type, flag):
    out = compute_rmv({"billType": bill_type, flag: True, "rmvCharge": Decimal("999")})
    assert out["rmvCharge"] == Decimal("0")


def test_rmv_by_bill_type():
    assert compute_rmv({"billType": "cash"})["rmvCharge"] == RMV_CHARGE_CASH
    assert compute_rmv({"billType": "leasing"})["rmvCharge"] == RMV_CHARGE_LEASING
    assert "rmvCharge" not in compute_rmv({"billType": "advance"})
    assert compute_rmv({"billType": "advance", "rmvCharge": Decimal("5")})["rmvCharge"] == Decimal("5")


def test_stages_do_not_mutate_input():
    payload = {"billType": "cash", "bikePrice": Decimal("1")}
    compute_rmv(payload)
    compute_totals(payload)
    assert payload == {"billType": "cash", "bikePrice": Decimal("1")}


def test_cash_total_adds_rmv():
    out = compute_totals({
        "billType": "cash",
        "isEbicycle": False,
        "isTricycle": False,
        "bikePrice": Decimal("300000"),
        "rmvCharge": Decimal("13000"),
    })
    assert out["totalAmount"] == Decimal("313000")
    assert out["status"] == "completed"


def test_ebicycle_cash_total_excludes_rmv():
    out = compute_totals(compute_rmv({"billType": "cash", "isEbicycle": True, "bikePrice": Decimal("250000")}))
    assert out["totalAmount"] == Decimal("250000")
    assert out["status"] == "completed"


def test_leasing_total_is_down_payment():
    out = compute_totals(compute_rmv({
        "billType": "leasing",
        "bikePrice": Decimal("400000"),
        "downPayment": Decimal("100000"),
    }))
    assert out["totalAmount"] == Decimal("100000")
    assert out["downPayment"] == Decimal("100000")
    assert out["status"] == "completed"


def test_advance_balance():
    out = compute_totals({
        "billType": "advance",
        "bikePrice": Decimal("450000"),
        "downPayment": Decimal("100000"),
    })
    assert out["totalAmount"] == Decimal("450000")
    assert out["balanceAmount"] == Decimal("350000")
    assert out["status"] == "pending"


def test_totals_with_missing_or_text_numbers():
    out = compute_totals({"billType": "cash", "bikePrice": "abc"})
    assert out["totalAmount"] == Decimal("0")
    out = compute_totals({"billType": "leasing"})
    assert out["totalAmount"] == Decimal("0")
    assert out["downPayment"] == Decimal("0")


@pytest.mark.asyncio
async def test_pipeline_runs_sync_and_async_stages_in_order():
    async def add_b(payload):
        return {**payload, "order": payload["order"] + ["b"]}

    pipeline = PricingPipeline(
        lambda payload: {**payload, "order": payload["order"] + ["a"]},
        add_b,
        lambda payload: {**payload, "order": payload["order"] + ["c"]},
    )
    out = await pipeline.run({"order": []})
    assert out["order"] == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_full_pipeline_cash_motorcycle():
    pipeline = build_pricing_pipeline(AsyncMock(return_value=False))
    out = await pipeline.run({"bikePrice": Decimal("300000")})
    assert out["billType"] == "cash"
    assert out["vehicleType"] == "E-MOTORCYCLE"
    assert out["rmvCharge"] == RMV_CHARGE_CASH
    assert out["totalAmount"] == Decimal("313000")
    assert out["status"] == "completed"


@pytest.mark.asyncio
async def test_full_pipeline_leasing_tricycle_becomes_cash():
    pipeline = build_pricing_pipeline(AsyncMock(return_value=True))
    out = await pipeline.run({
        "billType": "leasing",
        "vehicleType": "e-tricycle",
        "bikePrice": Decimal("500000"),
        "downPayment": Decimal("100000"),
    })
    assert out["billType"] == "cash"
    assert out["isFirstTricycleSale"] is True
    assert out["rmvCharge"] == Decimal("0")
    assert out["totalAmount"] == Decimal("500000")


@pytest.mark.asyncio
async def test_full_pipeline_is_stable_on_rerun():
    pipeline = build_pricing_pipeline(AsyncMock(return_value=False))
    once = await pipeline.run({"billType": "advance", "bikePrice": "450000", "downPayment": "100000"})
    twice = await pipeline.run(once)
    assert twice == once
