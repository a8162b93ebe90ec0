"""Bill pricing rules and the pipeline that applies them.

Every stage takes the whole payload and returns a new dict; inputs are
never mutated. Only apply_vehicle_type_flags touches storage, through the
claim callable it is given.
"""

import inspect
from decimal import Decimal
from functools import partial
from typing import Any, Awaitable, Callable, Dict, Mapping, Union

from app.models.enums import BillType, BillStatus, VehicleType
from app.utils.bill_payload import normalize_enums, parse_number

Payload = Dict[str, Any]
Stage = Callable[[Payload], Union[Payload, Awaitable[Payload]]]
ClaimFirstSale = Callable[[], Awaitable[bool]]

RMV_CHARGE_CASH = Decimal("13000")
RMV_CHARGE_LEASING = Decimal("13500")

CASH_ONLY_VEHICLES = frozenset({VehicleType.E_TRICYCLE.value, VehicleType.E_MOTORBICYCLE.value})


async def apply_vehicle_type_flags(payload: Mapping[str, Any], claim_first_sale: ClaimFirstSale) -> Payload:
    """
    Derive isTricycle / isEbicycle from vehicleType and mark the first
    tricycle sale ever recorded.

    `claim_first_sale` bumps the global tricycle-sale counter and returns
    True only for the very first sale. It is not called when the payload
    was already a tricycle (re-pricing an existing tricycle bill). A bill
    that stops being a tricycle loses the marker.
    """
    out = dict(payload)
    was_tricycle = bool(out.get("isTricycle"))
    vehicle_type = str(out.get("vehicleType") or "").upper()
    out["isTricycle"] = vehicle_type == VehicleType.E_TRICYCLE.value
    out["isEbicycle"] = vehicle_type == VehicleType.E_MOTORBICYCLE.value
    if out["isTricycle"] and not was_tricycle:
        if await claim_first_sale():
            out["isFirstTricycleSale"] = True
    elif not out["isTricycle"]:
        # the marker belongs to tricycle bills only
        out["isFirstTricycleSale"] = False
    return out


def restrict_special_vehicle_bill_type(payload: Mapping[str, Any]) -> Payload:
    """Tricycles and e-bicycles are sold for cash only."""
    out = dict(payload)
    if out.get("isTricycle") or out.get("isEbicycle"):
        out["billType"] = BillType.CASH.value
    return out


def compute_rmv(payload: Mapping[str, Any]) -> Payload:
    """
    Registration charge: waived for tricycles and e-bicycles, fixed for cash
    and leasing motorcycles, left as-is for advance bills.
    """
    out = dict(payload)
    if out.get("isTricycle") or out.get("isEbicycle"):
        out["rmvCharge"] = Decimal("0")
        return out
    if out.get("billType") == BillType.CASH.value:
        out["rmvCharge"] = RMV_CHARGE_CASH
    elif out.get("billType") == BillType.LEASING.value:
        out["rmvCharge"] = RMV_CHARGE_LEASING
    return out


def compute_totals(payload: Mapping[str, Any]) -> Payload:
    """
    Final amounts and status.

    - leasing: the dealer only takes the down payment, so total = down payment
    - advance: total = bike price, balance = total - down payment
    - cash: bike price, plus the RMV charge unless tricycle / e-bicycle
    Status is pending for advance bills and completed otherwise.
    """
    out = dict(payload)
    bike_price = parse_number(out.get("bikePrice"))
    rmv_charge = parse_number(out.get("rmvCharge"))
    bill_type = out.get("billType")

    if bill_type == BillType.LEASING.value:
        down_payment = parse_number(out.get("downPayment"))
        out["totalAmount"] = down_payment
        out["downPayment"] = down_payment
    elif bill_type == BillType.ADVANCE.value:
        down_payment = parse_number(out.get("downPayment"))
        out["totalAmount"] = bike_price
        out["downPayment"] = down_payment
        out["balanceAmount"] = bike_price - down_payment
    elif out.get("isEbicycle") or out.get("isTricycle"):
        out["totalAmount"] = bike_price
    else:
        out["totalAmount"] = bike_price + rmv_charge

    out["status"] = (
        BillStatus.PENDING.value if bill_type == BillType.ADVANCE.value else BillStatus.COMPLETED.value
    )
    return out


class PricingPipeline:
    """Runs stages in order; async stages are awaited."""

    def __init__(self, *stages: Stage):
        self.stages = stages

    async def run(self, payload: Mapping[str, Any]) -> Payload:
        result: Payload = dict(payload)
        for stage in self.stages:
            result = stage(result)
            if inspect.isawaitable(result):
                result = await result
        return result


def build_pricing_pipeline(claim_first_sale: ClaimFirstSale) -> PricingPipeline:
    """The pipeline shared by bill creation and bill updates."""
    return PricingPipeline(
        normalize_enums,
        partial(apply_vehicle_type_flags, claim_first_sale=claim_first_sale),
        restrict_special_vehicle_bill_type,
        compute_rmv,
        compute_totals,
    )
