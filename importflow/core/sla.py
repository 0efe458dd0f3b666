"""SLA deadline and tone derived from a dossier's stage clock.

Nothing here is stored: every read recomputes from ``stage_entered_at``.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Literal

from importflow.domain import Dossier

SlaTone = Literal["breached", "at-risk", "on-track"]

AT_RISK_HOURS = 6.0
CRITICAL_SLA_HOURS = 12.0


@dataclass(slots=True, frozen=True)
class SlaStatus:
    started_at: datetime
    deadline: datetime
    hours_remaining: float
    tone: SlaTone

    @property
    def display_hours(self) -> int:
        return max(0, round(self.hours_remaining))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def classify(hours_remaining: float, *, at_risk_hours: float = AT_RISK_HOURS) -> SlaTone:
    if hours_remaining <= 0:
        return "breached"
    if hours_remaining <= at_risk_hours:
        return "at-risk"
    return "on-track"


def stage_clock_start(dossier: Dossier, now: datetime) -> datetime:
    if dossier.stage_entered_at is not None:
        return dossier.stage_entered_at
    oldest = dossier.history.oldest()
    if oldest is not None:
        return oldest.timestamp
    return now


def compute_sla(
    dossier: Dossier,
    now: datetime | None = None,
    *,
    at_risk_hours: float = AT_RISK_HOURS,
) -> SlaStatus:
    now = now or utcnow()
    started_at = stage_clock_start(dossier, now)
    deadline = started_at + timedelta(hours=dossier.sla_hours)
    hours_remaining = (deadline - now) / timedelta(hours=1)
    return SlaStatus(
        started_at=started_at,
        deadline=deadline,
        hours_remaining=hours_remaining,
        tone=classify(hours_remaining, at_risk_hours=at_risk_hours),
    )


def is_critical(dossier: Dossier, *, threshold_hours: float = CRITICAL_SLA_HOURS) -> bool:
    """Tight allowances are highlighted in the worklist."""

    return dossier.sla_hours <= threshold_hours
