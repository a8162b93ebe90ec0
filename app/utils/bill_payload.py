"""Bill payload normalization.

Turns whatever the client sent (camelCase or legacy snake_case keys, numbers
as strings, dates as strings or datetimes) into the canonical camelCase patch
the pricing pipeline works on. Nothing here raises for bad input: a value
that cannot be used is dropped and reported, never turned into an error.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Tuple

from app.models.enums import BillType, VehicleType

# canonical key -> legacy key accepted when the canonical one is absent
FIELD_ALIASES: Dict[str, str] = {
    "billType": "bill_type",
    "billDate": "bill_date",
    "bikePrice": "bike_price",
    "totalAmount": "total_amount",
    "downPayment": "down_payment",
    "balanceAmount": "balance_amount",
    "motorNumber": "motor_number",
    "chassisNumber": "chassis_number",
    "customerName": "customer_name",
    "customerNIC": "customer_nic",
    "customerAddress": "customer_address",
    "bikeModel": "model_name",
    "estimatedDeliveryDate": "estimated_delivery_date",
    "vehicleType": "vehicle_type",
}

NUMERIC_FIELDS = frozenset({"bikePrice", "totalAmount", "downPayment", "balanceAmount"})
DATE_FIELDS = frozenset({"billDate", "estimatedDeliveryDate"})

BILL_TYPES = tuple(t.value for t in BillType)
DEFAULT_BILL_TYPE = BillType.CASH.value


@dataclass
class NormalizationResult:
    """Sparse patch plus the input keys that were silently left out of it."""
    patch: Dict[str, Any]
    ignored: List[str] = field(default_factory=list)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def to_decimal(value: Any) -> Optional[Decimal]:
    """Parse a number-like value, returning None instead of NaN or an error."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value)) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None
    return None


def parse_number(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    """to_decimal with a fallback, for places that always need a number."""
    parsed = to_decimal(value)
    return default if parsed is None else parsed


def to_iso_date(value: Any) -> Optional[str]:
    """Serialize a date-like value as ISO-8601; None when it does not parse."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day).isoformat()
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text).isoformat()
        except ValueError:
            return None
    return None


def normalize_bill_type(value: Any) -> str:
    bill_type = str(value or "").strip().lower()
    return bill_type if bill_type in BILL_TYPES else DEFAULT_BILL_TYPE


def normalize_vehicle_type(value: Any) -> str:
    vehicle_type = str(value or "").upper()
    if "TRICYCLE" in vehicle_type:
        return VehicleType.E_TRICYCLE.value
    if "BICYCLE" in vehicle_type:
        return VehicleType.E_MOTORBICYCLE.value
    return VehicleType.E_MOTORCYCLE.value


def normalize_enums(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Clamp billType and vehicleType to their closed vocabularies, filling defaults."""
    out = dict(payload)
    out["billType"] = normalize_bill_type(out.get("billType"))
    out["vehicleType"] = normalize_vehicle_type(out.get("vehicleType"))
    return out


def _resolve(raw: Mapping[str, Any], canonical: str) -> Tuple[Optional[str], Any]:
    """Pick the canonical key when present, else its legacy alias."""
    if canonical in raw:
        return canonical, raw[canonical]
    alias = FIELD_ALIASES[canonical]
    if alias in raw:
        return alias, raw[alias]
    return None, None


def _coerce(key: str, value: Any) -> Any:
    if key in NUMERIC_FIELDS:
        return to_decimal(value)
    if key in DATE_FIELDS:
        return to_iso_date(value)
    if key == "billType":
        return normalize_bill_type(value)
    if key == "vehicleType":
        return normalize_vehicle_type(value)
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return str(value)
    # nested objects, lists and booleans are not valid text fields
    return None


def normalize_bill_payload_with_report(raw: Optional[Mapping[str, Any]]) -> NormalizationResult:
    """
    Normalize a raw bill payload and report which input keys were dropped.

    Only the fields in FIELD_ALIASES survive. A canonical camelCase key
    always wins over its snake_case alias; the alias is used only when the
    canonical key is missing. Values that are empty or fail to coerce are
    omitted, so the result is a sparse patch.
    """
    raw = raw or {}
    patch: Dict[str, Any] = {}
    used = set()

    for canonical in FIELD_ALIASES:
        source_key, value = _resolve(raw, canonical)
        if source_key is None:
            continue
        used.add(source_key)
        if _is_empty(value):
            continue
        coerced = _coerce(canonical, value)
        if _is_empty(coerced):
            continue
        patch[canonical] = coerced

    ignored = sorted(str(key) for key in raw if key not in used or _dropped(key, patch))
    return NormalizationResult(patch=patch, ignored=ignored)


def _dropped(source_key: str, patch: Mapping[str, Any]) -> bool:
    for canonical, alias in FIELD_ALIASES.items():
        if source_key in (canonical, alias):
            return canonical not in patch
    return True


def normalize_bill_payload(raw: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Sparse, canonical patch built from an arbitrary bill payload."""
    return normalize_bill_payload_with_report(raw).patch
