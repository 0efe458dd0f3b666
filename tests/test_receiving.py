from __future__ import annotations

from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest

from importflow.core.receiving import validate_receipt
from importflow.core.validation import ValidationError


def test_flags_default_to_no_cold_chain_and_temperature_ok():
    record = validate_receipt({"lot": " L7 ", "expiry": "2026-03", "quantity": "12.5"})
    assert record.lot == "L7"
    assert record.quantity == 12.5
    assert record.cold_chain is False
    assert record.temperature_ok is True


def test_flags_are_carried_through():
    record = validate_receipt(
        {"lot": "L8", "expiry": "2026-03", "quantity": 4, "cold_chain": True, "temperature_ok": False}
    )
    assert record.cold_chain is True
    assert record.temperature_ok is False


@pytest.mark.parametrize(
    "draft, missing",
    [
        ({}, ["lot", "expiry", "quantity"]),
        ({"lot": "L1", "expiry": "2025-12"}, ["quantity"]),
        ({"lot": "", "expiry": "2025-12", "quantity": 3}, ["lot"]),
        ({"lot": "L1", "expiry": None, "quantity": 3}, ["expiry"]),
    ],
)
def test_missing_fields_are_named(draft, missing):
    with pytest.raises(ValidationError) as excinfo:
        validate_receipt(draft)
    assert excinfo.value.missing == missing


@pytest.mark.parametrize("quantity", [0, -5, "abc", "nan", True])
def test_quantity_must_be_positive_number(quantity):
    with pytest.raises(ValidationError) as excinfo:
        validate_receipt({"lot": "L1", "expiry": "2025-12", "quantity": quantity})
    assert excinfo.value.missing == ["quantity"]


@pytest.mark.parametrize("expiry", ["2025/12", "12-2025", "2025-13"])
def test_expiry_is_year_month(expiry):
    with pytest.raises(ValidationError) as excinfo:
        validate_receipt({"lot": "L1", "expiry": expiry, "quantity": 1})
    assert excinfo.value.missing == ["expiry"]
