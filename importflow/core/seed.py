"""Demo dossiers and the Pre-Alert factory."""
from __future__ import annotations

import random
from datetime import date, datetime, timedelta
from typing import Iterable

from importflow.core.sla import utcnow
from importflow.core.stages import INITIAL_INDEX
from importflow.domain import (
    SYSTEM_ACTOR,
    DocumentId as D,
    DocumentStatus as S,
    Dossier,
    HistoryEntry,
    HistoryLog,
    ProductLine,
    Role,
)


def _hours(value: float) -> timedelta:
    return timedelta(hours=value)


def _log(*entries: tuple[datetime, str, str]) -> HistoryLog:
    """Build a log from oldest-first tuples."""

    log = HistoryLog()
    for timestamp, actor, message in entries:
        log = log.append(HistoryEntry(timestamp=timestamp, actor=actor, message=message))
    return log


def seed_dossiers(now: datetime | None = None) -> list[Dossier]:
    now = now or utcnow()
    return [
        Dossier(
            id="IMP-24097",
            supplier="LabGen Pharma",
            warehouse="WeStorage",
            transport_mode="Sea",
            incoterm="CIF",
            forwarder="DHL GF",
            eta=date(2025, 9, 21),
            stage_index=2,
            responsible=Role.QF,
            sla_hours=24,
            stage_entered_at=now - _hours(2),
            products=(
                ProductLine(
                    sku="RX-202",
                    description="Paracetamol 500mg",
                    registration_id="ISP-1234",
                    storage_condition="15-25°C",
                ),
            ),
            documents={
                D.INVOICE: S.APPROVED,
                D.PACKING_LIST: S.APPROVED,
                D.BILL_OF_LADING: S.UPLOADED,
                D.SAFETY_DATA_SHEET: S.APPROVED,
                D.SANITARY_REGISTRATION: S.PENDING,
                D.IMPORT_PERMIT: S.PENDING,
                D.CERTIFICATE_OF_ANALYSIS: S.PENDING,
                D.LABELING: S.PENDING,
            },
            history=_log(
                (now - _hours(26), Role.COMEX.value, "Pre-Alert created"),
                (now - _hours(20), Role.COMEX.value, "Base documents reviewed"),
                (now - _hours(2), SYSTEM_ACTOR, "Sent to QF Review"),
            ),
        ),
        Dossier(
            id="IMP-24122",
            supplier="Farmacorp",
            warehouse="Loginsa",
            transport_mode="Air",
            incoterm="DAP",
            forwarder="K+N",
            eta=date(2025, 8, 30),
            stage_index=1,
            responsible=Role.COMEX,
            sla_hours=8,
            stage_entered_at=now - _hours(6),
            products=(
                ProductLine(
                    sku="COS-88",
                    description="Face Cream 50ml",
                    registration_id="Notified Cosmetic",
                    storage_condition="Ambient",
                ),
            ),
            documents={
                D.INVOICE: S.UPLOADED,
                D.PACKING_LIST: S.PENDING,
                D.BILL_OF_LADING: S.PENDING,
                D.SAFETY_DATA_SHEET: S.PENDING,
                D.CERTIFICATE_OF_ORIGIN: S.PENDING,
            },
            history=_log((now - _hours(6), Role.COMEX.value, "Review pending")),
        ),
        Dossier(
            id="IMP-24160",
            supplier="BioHealth EU",
            warehouse="Concon",
            transport_mode="Sea",
            incoterm="FOB",
            forwarder="DB Schenker",
            eta=date(2025, 10, 5),
            stage_index=3,
            responsible=Role.OPERATIONS,
            sla_hours=12,
            stage_entered_at=now - _hours(4),
            products=(
                ProductLine(
                    sku="BIO-71",
                    description="Laboratory reagents",
                    registration_id="ISP-5678",
                    storage_condition="2-8°C",
                ),
            ),
            documents={
                D.INVOICE: S.APPROVED,
                D.PACKING_LIST: S.APPROVED,
                D.BILL_OF_LADING: S.APPROVED,
                D.SAFETY_DATA_SHEET: S.APPROVED,
                D.SANITARY_REGISTRATION: S.APPROVED,
            },
            history=_log((now - _hours(40), Role.QF.value, "Regulatory approval OK")),
        ),
    ]


def new_dossier_id(taken: Iterable[str], rng: random.Random | None = None) -> str:
    rng = rng or random.Random()
    used = set(taken)
    while True:
        candidate = f"IMP-{rng.randint(10000, 99999)}"
        if candidate not in used:
            return candidate


def new_pre_alert(
    dossier_id: str,
    *,
    now: datetime | None = None,
    sla_hours: float = 24,
    eta_days: int = 15,
) -> Dossier:
    now = now or utcnow()
    return Dossier(
        id=dossier_id,
        supplier="New Supplier",
        warehouse="—",
        transport_mode="To be defined",
        incoterm="—",
        forwarder="—",
        eta=(now + timedelta(days=eta_days)).date(),
        stage_index=INITIAL_INDEX,
        responsible=Role.COMEX,
        sla_hours=sla_hours,
        stage_entered_at=now,
        history=_log((now, Role.COMEX.value, "Pre-Alert created")),
    )
