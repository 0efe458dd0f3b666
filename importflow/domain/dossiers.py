"""Domain entities for import dossiers."""
from __future__ import annotations

from datetime import date
from types import MappingProxyType
from enum import Enum
from typing import Any, Iterator, Literal, Mapping

from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    SerializerFunctionWrapHandler,
    constr,
    field_serializer,
    field_validator,
)

SYSTEM_ACTOR = "System"
COMMENT_ACTOR = "Comment"
NO_RESPONSIBLE = "—"


class Stage(str, Enum):
    """Workflow stages in their fixed order."""

    PRE_ALERT = "Pre-Alert"
    COMEX_REVIEW = "COMEX Review"
    QF_REVIEW = "QF Review"
    ENTRY_SCHEDULING = "Entry Scheduling"
    ARRIVAL_RECEIVING = "Arrival & Receiving"
    QF_RELEASE = "QF Release"
    CLOSED = "Closed"


class Role(str, Enum):
    COMEX = "COMEX"
    QF = "QF"
    OPERATIONS = "Operations"


class DocumentId(str, Enum):
    INVOICE = "invoice"
    PACKING_LIST = "packing-list"
    BILL_OF_LADING = "bill-of-lading"
    CERTIFICATE_OF_ORIGIN = "certificate-of-origin"
    SAFETY_DATA_SHEET = "safety-data-sheet"
    SANITARY_REGISTRATION = "sanitary-registration"
    IMPORT_PERMIT = "import-permit"
    CERTIFICATE_OF_ANALYSIS = "certificate-of-analysis"
    LABELING = "labeling"


class DocumentStatus(str, Enum):
    PENDING = "pending"
    UPLOADED = "uploaded"
    APPROVED = "approved"


class ProductLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    sku: str
    description: str
    registration_id: str
    storage_condition: str


class ReceivingRecord(BaseModel):
    """A physical receipt event. Immutable once accepted."""

    model_config = ConfigDict(frozen=True)

    lot: constr(min_length=1)
    expiry: constr(pattern=r"^\d{4}-\d{2}$")
    quantity: float = Field(gt=0)
    cold_chain: bool = False
    temperature_ok: bool = True


class HistoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: AwareDatetime
    actor: str
    message: str


class HistoryLog(RootModel[tuple[HistoryEntry, ...]]):
    """Append-only history, newest entry first.

    ``append`` never touches the receiver; it returns a new log with the
    entry placed in front.
    """

    model_config = ConfigDict(frozen=True)

    root: tuple[HistoryEntry, ...] = ()

    def append(self, entry: HistoryEntry) -> "HistoryLog":
        return HistoryLog((entry, *self.root))

    def oldest(self) -> HistoryEntry | None:
        return self.root[-1] if self.root else None

    def __iter__(self) -> Iterator[HistoryEntry]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, index: int) -> HistoryEntry:
        return self.root[index]


class Dossier(BaseModel):
    """Full case file of one tracked import shipment."""

    model_config = ConfigDict(frozen=True)

    id: constr(min_length=1)
    supplier: str
    warehouse: str
    transport_mode: str
    incoterm: str
    forwarder: str
    eta: date
    stage_index: int = 0
    responsible: Role | Literal["—"] = Role.COMEX
    sla_hours: float = Field(default=24, gt=0)
    stage_entered_at: AwareDatetime | None = None
    products: tuple[ProductLine, ...] = ()
    documents: dict[DocumentId, DocumentStatus] = Field(default_factory=dict, validate_default=True)
    receipts: tuple[ReceivingRecord, ...] = ()
    history: HistoryLog = Field(default_factory=HistoryLog)

    @field_validator("stage_index")
    @classmethod
    def _stage_in_catalog(cls, value: int) -> int:
        if not 0 <= value < len(Stage):
            raise ValueError(f"stage index {value} outside 0..{len(Stage) - 1}")
        return value

    @field_validator("documents", mode="after")
    @classmethod
    def _freeze_documents(cls, value: Mapping[DocumentId, DocumentStatus]) -> Mapping[DocumentId, DocumentStatus]:
        # status changes go through with_document_status
        return MappingProxyType(dict(value))

    @field_serializer("documents", mode="wrap")
    def _dump_documents(self, value: Mapping[DocumentId, DocumentStatus], handler: SerializerFunctionWrapHandler) -> Any:
        return handler(dict(value))

    @property
    def stage(self) -> Stage:
        return list(Stage)[self.stage_index]

    def document_status(self, doc_id: DocumentId) -> DocumentStatus:
        return self.documents.get(doc_id, DocumentStatus.PENDING)

    def with_document_status(self, doc_id: DocumentId, status: DocumentStatus) -> "Dossier":
        documents = MappingProxyType({**self.documents, doc_id: status})
        return self.model_copy(update={"documents": documents})
