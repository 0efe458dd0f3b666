"""Worklist filtering and ordering."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Iterable

from importflow.core.sla import compute_sla, utcnow
from importflow.core.stages import stage_index
from importflow.core.validation import ValidationError
from importflow.domain import Dossier

ALL_STAGES = "all"


class SortKey(str, Enum):
    ETA_ASC = "eta_asc"
    ETA_DESC = "eta_desc"
    SLA_ASC = "sla_asc"
    SLA_DESC = "sla_desc"


def _matches(dossier: Dossier, needle: str) -> bool:
    haystack = (
        dossier.id,
        dossier.supplier,
        dossier.warehouse,
        dossier.transport_mode,
        dossier.forwarder,
    )
    return any(needle in str(value).lower() for value in haystack)


def filter_and_sort(
    dossiers: Iterable[Dossier],
    query: str = "",
    stage_filter: str = ALL_STAGES,
    sort_key: SortKey | str = SortKey.ETA_ASC,
    *,
    now: datetime | None = None,
) -> list[Dossier]:
    """Return a new, ordered list; the input collection is left as is.

    Ordering relies on ``sorted`` being stable, so equal keys keep their
    original relative order in both directions.
    """

    try:
        key = SortKey(sort_key)
    except ValueError:
        raise ValidationError(f"Unknown sort key {sort_key!r}", missing=["sort"]) from None

    needle = (query or "").strip().lower()
    items = [item for item in dossiers if _matches(item, needle)]

    if stage_filter and stage_filter.strip().lower() != ALL_STAGES:
        wanted = stage_index(stage_filter)
        items = [item for item in items if item.stage_index == wanted]

    if key in (SortKey.ETA_ASC, SortKey.ETA_DESC):
        return sorted(items, key=lambda item: item.eta, reverse=key is SortKey.ETA_DESC)

    now = now or utcnow()
    scored = [(compute_sla(item, now).hours_remaining, item) for item in items]
    scored.sort(key=lambda pair: pair[0], reverse=key is SortKey.SLA_DESC)
    return [item for _, item in scored]
