"""Domain layer definitions."""

from .dossiers import (
    COMMENT_ACTOR,
    NO_RESPONSIBLE,
    SYSTEM_ACTOR,
    DocumentId,
    DocumentStatus,
    Dossier,
    HistoryEntry,
    HistoryLog,
    ProductLine,
    ReceivingRecord,
    Role,
    Stage,
)

__all__ = [
    "COMMENT_ACTOR",
    "NO_RESPONSIBLE",
    "SYSTEM_ACTOR",
    "DocumentId",
    "DocumentStatus",
    "Dossier",
    "HistoryEntry",
    "HistoryLog",
    "ProductLine",
    "ReceivingRecord",
    "Role",
    "Stage",
]
