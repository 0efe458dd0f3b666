"""Receiving ledger: validation and recording of physical receipts."""
from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any, Mapping

from importflow.core.validation import ValidationError
from importflow.domain import Dossier, HistoryEntry, ReceivingRecord

REQUIRED_FIELDS = ("lot", "expiry", "quantity")
_EXPIRY_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _to_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return bool(value)


def validate_receipt(draft: Mapping[str, Any]) -> ReceivingRecord:
    """Turn a candidate receipt into a record or raise naming the failing fields."""

    missing = [name for name in REQUIRED_FIELDS if _is_blank(draft.get(name))]
    if missing:
        raise ValidationError(
            "Complete lot, expiry and quantity. Missing: " + ", ".join(missing),
            missing=missing,
        )

    raw_quantity = draft["quantity"]
    if isinstance(raw_quantity, bool):
        raise ValidationError("quantity must be a positive number", missing=["quantity"])
    try:
        quantity = float(str(raw_quantity).strip())
    except (TypeError, ValueError):
        raise ValidationError("quantity must be a positive number", missing=["quantity"]) from None
    if not math.isfinite(quantity) or quantity <= 0:
        raise ValidationError("quantity must be a positive number", missing=["quantity"])

    expiry = str(draft["expiry"]).strip()
    if not _EXPIRY_RE.match(expiry):
        raise ValidationError("expiry must use the YYYY-MM format", missing=["expiry"])

    return ReceivingRecord(
        lot=str(draft["lot"]).strip(),
        expiry=expiry,
        quantity=quantity,
        cold_chain=_to_bool(draft.get("cold_chain"), False),
        temperature_ok=_to_bool(draft.get("temperature_ok"), True),
    )


def append_receipt(dossier: Dossier, record: ReceivingRecord, *, actor: str, now: datetime) -> Dossier:
    entry = HistoryEntry(timestamp=now, actor=actor, message=f"Receipt recorded: lot {record.lot}")
    return dossier.model_copy(
        update={
            "receipts": (*dossier.receipts, record),
            "history": dossier.history.append(entry),
        }
    )
