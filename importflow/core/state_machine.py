"""Dossier state machine.

Every command checks role permission first, then the stage precondition,
and only then builds a new :class:`Dossier`. Inputs are never mutated, so a
rejected command leaves no trace and a successful one is applied whole.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from importflow.core.documents import can_edit_document, missing_for_transition, next_status
from importflow.core.permissions import Action, as_role, ensure_permitted, permitted_actions
from importflow.core.receiving import append_receipt, validate_receipt
from importflow.core.sla import utcnow
from importflow.core.stages import is_terminal, stage_index
from importflow.core.validation import AuthorizationError, PreconditionError, ValidationError
from importflow.domain import (
    COMMENT_ACTOR,
    NO_RESPONSIBLE,
    SYSTEM_ACTOR,
    DocumentId,
    Dossier,
    HistoryEntry,
    Role,
    Stage,
)


@dataclass(slots=True, frozen=True)
class Transition:
    """Outcome of an accepted command: the new dossier and what changed."""

    dossier: Dossier
    action: str
    message: str


def _advance(
    dossier: Dossier,
    *,
    target: Stage,
    responsible: Role | str,
    actor: str,
    note: str,
    now: datetime,
) -> Dossier:
    entry = HistoryEntry(timestamp=now, actor=actor, message=note)
    return dossier.model_copy(
        update={
            "stage_index": stage_index(target),
            "responsible": responsible,
            "stage_entered_at": now,
            "history": dossier.history.append(entry),
        }
    )


def submit_pre_alert(dossier: Dossier, role: Role | str, *, now: datetime | None = None) -> Transition:
    role = as_role(role)
    ensure_permitted(role, dossier.stage, Action.SUBMIT_PRE_ALERT)
    updated = _advance(
        dossier,
        target=Stage.COMEX_REVIEW,
        responsible=Role.COMEX,
        actor=role.value,
        note="Pre-Alert submitted to COMEX Review",
        now=now or utcnow(),
    )
    return Transition(updated, Action.SUBMIT_PRE_ALERT.value, "Pre-Alert submitted")


def send_to_qf(dossier: Dossier, role: Role | str, *, now: datetime | None = None) -> Transition:
    role = as_role(role)
    ensure_permitted(role, dossier.stage, Action.SEND_TO_QF)
    missing = missing_for_transition(dossier, Stage.QF_REVIEW)
    if missing:
        names = [doc_id.value for doc_id in missing]
        raise PreconditionError(
            "Missing documents to send to QF: " + ", ".join(names),
            missing=names,
        )
    updated = _advance(
        dossier,
        target=Stage.QF_REVIEW,
        responsible=Role.QF,
        actor=SYSTEM_ACTOR,
        note="Sent to QF Review",
        now=now or utcnow(),
    )
    return Transition(updated, Action.SEND_TO_QF.value, "Dossier sent to QF")


def approve_qf(dossier: Dossier, role: Role | str, *, now: datetime | None = None) -> Transition:
    role = as_role(role)
    ensure_permitted(role, dossier.stage, Action.APPROVE_QF)
    updated = _advance(
        dossier,
        target=Stage.ENTRY_SCHEDULING,
        responsible=Role.OPERATIONS,
        actor=role.value,
        note="QF regulatory approval granted",
        now=now or utcnow(),
    )
    return Transition(updated, Action.APPROVE_QF.value, "Approved by QF")


def observe_qf(dossier: Dossier, role: Role | str, *, now: datetime | None = None) -> Transition:
    """Return the dossier to COMEX without moving the stage or the SLA clock."""

    role = as_role(role)
    ensure_permitted(role, dossier.stage, Action.OBSERVE_QF)
    entry = HistoryEntry(
        timestamp=now or utcnow(),
        actor=role.value,
        message="QF requested adjustments / additional records",
    )
    updated = dossier.model_copy(
        update={
            "responsible": Role.COMEX,
            "history": dossier.history.append(entry),
        }
    )
    return Transition(updated, Action.OBSERVE_QF.value, "Observed and returned to COMEX")


def schedule_entry(dossier: Dossier, role: Role | str, *, now: datetime | None = None) -> Transition:
    role = as_role(role)
    ensure_permitted(role, dossier.stage, Action.SCHEDULE_ENTRY)
    updated = _advance(
        dossier,
        target=Stage.ARRIVAL_RECEIVING,
        responsible=Role.OPERATIONS,
        actor=role.value,
        note="Operations scheduled warehouse entry",
        now=now or utcnow(),
    )
    return Transition(updated, Action.SCHEDULE_ENTRY.value, "Entry scheduled")


def record_receipt(
    dossier: Dossier,
    role: Role | str,
    record: Mapping[str, Any],
    *,
    now: datetime | None = None,
) -> Transition:
    role = as_role(role)
    ensure_permitted(role, dossier.stage, Action.RECORD_RECEIPT)
    accepted = validate_receipt(record)
    updated = append_receipt(dossier, accepted, actor=role.value, now=now or utcnow())
    return Transition(updated, Action.RECORD_RECEIPT.value, "Receipt recorded")


def final_release(dossier: Dossier, role: Role | str, *, now: datetime | None = None) -> Transition:
    role = as_role(role)
    ensure_permitted(role, dossier.stage, Action.FINAL_RELEASE)
    if not dossier.receipts:
        raise PreconditionError(
            "At least one receipt must be recorded before release.",
            missing=["receipts"],
        )
    updated = _advance(
        dossier,
        target=Stage.CLOSED,
        responsible=NO_RESPONSIBLE,
        actor=role.value,
        note="QF released lot(s) after document control",
        now=now or utcnow(),
    )
    return Transition(updated, Action.FINAL_RELEASE.value, "Dossier closed")


def toggle_document(dossier: Dossier, role: Role | str, doc_id: DocumentId | str) -> Transition:
    """Cycle a document pending -> uploaded -> approved -> pending.

    Leaves history untouched; the checklist itself shows the status.
    """

    role = as_role(role)
    try:
        doc = DocumentId(doc_id)
    except ValueError:
        raise ValidationError(f"Unknown document {doc_id!r}", missing=["document"]) from None
    if is_terminal(dossier.stage_index):
        raise PreconditionError("Closed dossiers cannot change documents", missing=[doc.value])
    if not can_edit_document(role, doc):
        raise AuthorizationError(
            f"Only the responsible role can edit {doc.value}",
            missing=[doc.value],
        )
    status = next_status(dossier.document_status(doc))
    updated = dossier.with_document_status(doc, status)
    return Transition(updated, "toggle_document", f"{doc.value}: {status.value}")


def add_comment(dossier: Dossier, role: Role | str, text: str, *, now: datetime | None = None) -> Transition:
    role = as_role(role)
    ensure_permitted(role, dossier.stage, Action.ADD_COMMENT)
    note = (text or "").strip()
    if not note:
        raise ValidationError("Comment text is required", missing=["text"])
    entry = HistoryEntry(timestamp=now or utcnow(), actor=COMMENT_ACTOR, message=f"Note: {note}")
    updated = dossier.model_copy(update={"history": dossier.history.append(entry)})
    return Transition(updated, Action.ADD_COMMENT.value, "Comment added")


def available_actions(dossier: Dossier, role: Role | str) -> list[str]:
    """Actions the UI may enable for ``role`` on this dossier."""

    role = as_role(role)
    return sorted(action.value for action in permitted_actions(role, dossier.stage))
