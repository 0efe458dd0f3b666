"""Document catalog and per-stage document gates."""
from __future__ import annotations

from importflow.domain import DocumentId, DocumentStatus, Dossier, Role, Stage

DOCUMENT_CATALOG: dict[DocumentId, dict[str, object]] = {
    DocumentId.INVOICE: {
        "label": "Commercial Invoice",
        "role": Role.COMEX,
        "mandatory": True,
    },
    DocumentId.PACKING_LIST: {
        "label": "Packing List",
        "role": Role.COMEX,
        "mandatory": True,
    },
    DocumentId.BILL_OF_LADING: {
        "label": "BL / AWB",
        "role": Role.COMEX,
        "mandatory": True,
    },
    DocumentId.CERTIFICATE_OF_ORIGIN: {
        "label": "Certificate of Origin",
        "role": Role.COMEX,
        "mandatory": False,
    },
    DocumentId.SAFETY_DATA_SHEET: {
        "label": "Safety Data Sheet (SDS / MSDS)",
        "role": Role.COMEX,
        "mandatory": True,
    },
    DocumentId.SANITARY_REGISTRATION: {
        "label": "Sanitary Registration (if applicable)",
        "role": Role.QF,
        "mandatory": False,
    },
    DocumentId.IMPORT_PERMIT: {
        "label": "Import Permit / Resolution (if applicable)",
        "role": Role.QF,
        "mandatory": False,
    },
    DocumentId.CERTIFICATE_OF_ANALYSIS: {
        "label": "Certificate of Analysis (CoA)",
        "role": Role.QF,
        "mandatory": False,
    },
    DocumentId.LABELING: {
        "label": "Approved Labeling",
        "role": Role.QF,
        "mandatory": False,
    },
}

# keyed by the stage a dossier is moving into
REQUIRED_DOCUMENTS: dict[Stage, tuple[DocumentId, ...]] = {
    Stage.QF_REVIEW: (
        DocumentId.INVOICE,
        DocumentId.PACKING_LIST,
        DocumentId.BILL_OF_LADING,
        DocumentId.SAFETY_DATA_SHEET,
    ),
}

SATISFIED_STATUSES = frozenset({DocumentStatus.UPLOADED, DocumentStatus.APPROVED})

_NEXT_STATUS: dict[DocumentStatus, DocumentStatus] = {
    DocumentStatus.PENDING: DocumentStatus.UPLOADED,
    DocumentStatus.UPLOADED: DocumentStatus.APPROVED,
    DocumentStatus.APPROVED: DocumentStatus.PENDING,
}


def missing_for_transition(dossier: Dossier, target: Stage = Stage.QF_REVIEW) -> list[DocumentId]:
    """Return the required documents for ``target`` that are not yet uploaded or approved."""

    required = REQUIRED_DOCUMENTS.get(target, ())
    return [doc_id for doc_id in required if dossier.document_status(doc_id) not in SATISFIED_STATUSES]


def next_status(status: DocumentStatus) -> DocumentStatus:
    return _NEXT_STATUS[status]


def responsible_role(doc_id: DocumentId) -> Role:
    return DOCUMENT_CATALOG[doc_id]["role"]  # type: ignore[return-value]


def can_edit_document(role: Role, doc_id: DocumentId) -> bool:
    return responsible_role(doc_id) == role


def checklist(dossier: Dossier, role: Role) -> list[dict[str, object]]:
    gating = set(REQUIRED_DOCUMENTS.get(Stage.QF_REVIEW, ()))
    rows: list[dict[str, object]] = []
    for doc_id, definition in DOCUMENT_CATALOG.items():
        rows.append(
            {
                "id": doc_id.value,
                "label": definition["label"],
                "role": definition["role"].value,  # type: ignore[attr-defined]
                "mandatory": bool(definition["mandatory"]),
                "status": dossier.document_status(doc_id).value,
                "editable": can_edit_document(role, doc_id),
                "gates_qf_review": doc_id in gating,
            }
        )
    return rows
