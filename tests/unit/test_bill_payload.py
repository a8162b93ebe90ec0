"""Unit tests for bill payload normalization (pure logic, no DB)."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from app.utils.bill_payload import (
    normalize_bill_payload,
    normalize_bill_payload_with_report,
    normalize_bill_type,
    normalize_enums,
    normalize_vehicle_type,
    parse_number,
    to_decimal,
    to_iso_date,
)


def test_camel_case_fields_kept():
    patch = normalize_bill_payload({
        "customerName": "  Nimal Perera ",
        "customerNIC": "901234567V",
        "bikeModel": "TMR Q1",
        "bikePrice": "450000",
    })
    assert patch == {
        "customerName": "Nimal Perera",
        "customerNIC": "901234567V",
        "bikeModel": "TMR Q1",
        "bikePrice": Decimal("450000"),
    }


def test_snake_case_aliases_accepted():
    patch = normalize_bill_payload({
        "customer_name": "Kamal",
        "customer_nic": "199012345678",
        "model_name": "TMR G18",
        "bike_price": 300000,
        "down_payment": "50000.50",
        "motor_number": "M-1",
        "chassis_number": "C-1",
    })
    assert patch["customerName"] == "Kamal"
    assert patch["customerNIC"] == "199012345678"
    assert patch["bikeModel"] == "TMR G18"
    assert patch["bikePrice"] == Decimal("300000")
    assert patch["downPayment"] == Decimal("50000.50")
    assert patch["motorNumber"] == "M-1"
    assert patch["chassisNumber"] == "C-1"
    assert not any("_" in key for key in patch)


def test_camel_case_wins_over_alias():
    result = normalize_bill_payload_with_report({"customerName": "Camel", "customer_name": "Snake"})
    assert result.patch == {"customerName": "Camel"}
    assert result.ignored == ["customer_name"]


def test_snake_case_price_never_overrides_camel_case():
    patch = normalize_bill_payload({"bikePrice": "450000", "bike_price": "1"})
    assert patch["bikePrice"] == Decimal("450000")


def test_alias_used_even_when_canonical_is_invalid():
    # the canonical key is still the one consulted; a bad value is dropped, not replaced
    patch = normalize_bill_payload({"bikePrice": "abc", "bike_price": "100"})
    assert "bikePrice" not in patch


def test_unknown_fields_dropped_and_reported():
    result = normalize_bill_payload_with_report({
        "customerName": "A",
        "status": "cancelled",
        "isAdmin": True,
        "totalAmount": "1000",
    })
    assert "status" not in result.patch
    assert "isAdmin" not in result.patch
    assert result.patch["totalAmount"] == Decimal("1000")
    assert result.ignored == ["isAdmin", "status"]


def test_empty_and_invalid_values_omitted():
    result = normalize_bill_payload_with_report({
        "customerName": "   ",
        "customerAddress": None,
        "bikePrice": "not-a-number",
        "downPayment": "NaN",
        "billDate": "yesterday",
        "motorNumber": {"nested": True},
        "chassisNumber": ["C-1"],
    })
    assert result.patch == {}
    assert result.ignored == [
        "bikePrice", "billDate", "chassisNumber", "customerAddress",
        "customerName", "downPayment", "motorNumber",
    ]


def test_enums_clamped_only_when_present():
    assert "billType" not in normalize_bill_payload({"customerName": "A"})
    assert "vehicleType" not in normalize_bill_payload({"customerName": "A"})
    patch = normalize_bill_payload({"billType": "LEASING", "vehicleType": "e-tricycle"})
    assert patch["billType"] == "leasing"
    assert patch["vehicleType"] == "E-TRICYCLE"


def test_dates_serialized_as_iso():
    patch = normalize_bill_payload({
        "billDate": "2024-03-01T10:00:00Z",
        "estimated_delivery_date": date(2024, 4, 2),
    })
    assert patch["billDate"] == "2024-03-01T10:00:00+00:00"
    assert patch["estimatedDeliveryDate"] == "2024-04-02T00:00:00"


def test_none_payload():
    assert normalize_bill_payload(None) == {}
    assert normalize_bill_payload_with_report(None).ignored == []


def test_numbers_as_text_fields_become_strings():
    patch = normalize_bill_payload({"customerNIC": 901234567})
    assert patch["customerNIC"] == "901234567"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("cash", "cash"),
        (" Leasing ", "leasing"),
        ("ADVANCE", "advance"),
        ("hire-purchase", "cash"),
        (None, "cash"),
        ("", "cash"),
    ],
)
def test_normalize_bill_type(raw, expected):
    assert normalize_bill_type(raw) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("E-TRICYCLE", "E-TRICYCLE"),
        ("tricycle", "E-TRICYCLE"),
        ("e-motorbicycle", "E-MOTORBICYCLE"),
        ("BICYCLE", "E-MOTORBICYCLE"),
        ("E-MOTORCYCLE", "E-MOTORCYCLE"),
        ("scooter", "E-MOTORCYCLE"),
        (None, "E-MOTORCYCLE"),
    ],
)
def test_normalize_vehicle_type(raw, expected):
    assert normalize_vehicle_type(raw) == expected


def test_normalize_enums_fills_defaults_without_mutating():
    payload = {"customerName": "A"}
    out = normalize_enums(payload)
    assert out["billType"] == "cash"
    assert out["vehicleType"] == "E-MOTORCYCLE"
    assert payload == {"customerName": "A"}


def test_normalize_enums_is_idempotent():
    once = normalize_enums({"billType": "Leasing", "vehicleType": "bicycle"})
    assert normalize_enums(once) == once


def test_to_decimal():
    assert to_decimal("12.50") == Decimal("12.50")
    assert to_decimal(7) == Decimal("7")
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(True) is None
    assert to_decimal(float("inf")) is None
    assert to_decimal("Infinity") is None
    assert to_decimal("") is None
    assert to_decimal([1]) is None


def test_parse_number_default():
    assert parse_number(None) == Decimal("0")
    assert parse_number("abc", default=Decimal("5")) == Decimal("5")
    assert parse_number("10") == Decimal("10")


def test_to_iso_date():
    assert to_iso_date(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05"
    assert to_iso_date("2024-01-02") == "2024-01-02T00:00:00"
    assert to_iso_date("02/01/2024") is None
    assert to_iso_date(12345) is None
