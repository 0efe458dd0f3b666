"""Application service layer: the dossier session store and its commands."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Mapping

from importflow.core.documents import checklist, missing_for_transition
from importflow.core.permissions import Action, as_role, ensure_permitted
from importflow.core.query import ALL_STAGES, SortKey, filter_and_sort
from importflow.core.seed import new_dossier_id, new_pre_alert, seed_dossiers
from importflow.core.settings import WorkflowSettings
from importflow.core.sla import compute_sla, is_critical, utcnow
from importflow.core.stages import progress_percent
from importflow.core.state_machine import (
    Transition,
    add_comment,
    approve_qf,
    available_actions,
    final_release,
    observe_qf,
    record_receipt,
    schedule_entry,
    send_to_qf,
    submit_pre_alert,
    toggle_document,
)
from importflow.core.validation import DossierNotFoundError, WorkflowError
from importflow.domain import DocumentId, Dossier, Role
from importflow.exporters.dossier_json import export_dossier, export_filename
from importflow.infrastructure import DirectoryKeyValueStore, DossierRepository, InMemoryKeyValueStore

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Failure:
    kind: str
    detail: str
    missing: list[str] = field(default_factory=list)

    @classmethod
    def from_error(cls, error: WorkflowError) -> "Failure":
        return cls(kind=error.kind, detail=error.detail, missing=list(error.missing))


@dataclass(slots=True, frozen=True)
class CommandResult:
    ok: bool
    message: str = ""
    dossier: Dossier | None = None
    error: Failure | None = None

    def as_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"ok": self.ok, "message": self.message}
        if self.dossier is not None:
            payload["dossier"] = self.dossier.model_dump(mode="json")
        if self.error is not None:
            payload["error"] = {
                "kind": self.error.kind,
                "detail": self.error.detail,
                "missing": list(self.error.missing),
            }
        return payload


class DossierService:
    """Owns the dossier collection; every mutation goes through here.

    Core rules return new dossiers; this class swaps them into the
    collection and writes the result through the repository.
    """

    def __init__(
        self,
        repository: DossierRepository,
        settings: WorkflowSettings | None = None,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._repository = repository
        self._settings = settings or WorkflowSettings()
        self._clock = clock
        self._dossiers: list[Dossier] = self._repository.load_dossiers(self._seed)
        self._role: Role = self._repository.load_role(self._settings.default_role)
        self._selected_id: str | None = self._dossiers[0].id if self._dossiers else None

    # ------------------------------------------------------------------
    # internal helpers
    # ------------------------------------------------------------------
    def _seed(self) -> list[Dossier]:
        return seed_dossiers(self._clock())

    def _find(self, dossier_id: str) -> Dossier:
        for dossier in self._dossiers:
            if dossier.id == dossier_id:
                return dossier
        raise DossierNotFoundError(dossier_id)

    def _replace(self, updated: Dossier) -> None:
        self._dossiers = [updated if item.id == updated.id else item for item in self._dossiers]
        self._repository.save_dossiers(self._dossiers)

    def _execute(self, dossier_id: str, command: Callable[..., Transition], *args: Any, **kwargs: Any) -> CommandResult:
        try:
            dossier = self._find(dossier_id)
            transition = command(dossier, *args, **kwargs)
        except DossierNotFoundError as exc:
            logger.info("command %s rejected: %s", command.__name__, exc)
            return CommandResult(ok=False, error=Failure(kind="not_found", detail=str(exc)))
        except WorkflowError as exc:
            logger.info("command %s on %s rejected (%s): %s", command.__name__, dossier_id, exc.kind, exc.detail)
            return CommandResult(ok=False, error=Failure.from_error(exc))
        self._replace(transition.dossier)
        logger.info("command %s on %s applied", transition.action, dossier_id)
        return CommandResult(ok=True, message=transition.message, dossier=transition.dossier)

    def _acting(self, role: Role | str | None) -> Role | str:
        return self._role if role is None else role

    # ------------------------------------------------------------------
    # session state
    # ------------------------------------------------------------------
    @property
    def role(self) -> Role:
        return self._role

    def set_role(self, role: Role | str) -> Role:
        self._role = as_role(role)
        self._repository.save_role(self._role)
        return self._role

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    def select(self, dossier_id: str) -> Dossier:
        dossier = self._find(dossier_id)
        self._selected_id = dossier.id
        return dossier

    def list_dossiers(self) -> list[Dossier]:
        return list(self._dossiers)

    def get_dossier(self, dossier_id: str) -> Dossier:
        return self._find(dossier_id)

    # ------------------------------------------------------------------
    # commands
    # ------------------------------------------------------------------
    def submit_pre_alert(self, dossier_id: str, role: Role | str | None = None) -> CommandResult:
        return self._execute(dossier_id, submit_pre_alert, self._acting(role), now=self._clock())

    def send_to_qf(self, dossier_id: str, role: Role | str | None = None) -> CommandResult:
        return self._execute(dossier_id, send_to_qf, self._acting(role), now=self._clock())

    def approve_qf(self, dossier_id: str, role: Role | str | None = None) -> CommandResult:
        return self._execute(dossier_id, approve_qf, self._acting(role), now=self._clock())

    def observe_qf(self, dossier_id: str, role: Role | str | None = None) -> CommandResult:
        return self._execute(dossier_id, observe_qf, self._acting(role), now=self._clock())

    def schedule_entry(self, dossier_id: str, role: Role | str | None = None) -> CommandResult:
        return self._execute(dossier_id, schedule_entry, self._acting(role), now=self._clock())

    def record_receipt(
        self,
        dossier_id: str,
        record: Mapping[str, Any],
        role: Role | str | None = None,
    ) -> CommandResult:
        return self._execute(dossier_id, record_receipt, self._acting(role), record, now=self._clock())

    def final_release(self, dossier_id: str, role: Role | str | None = None) -> CommandResult:
        return self._execute(dossier_id, final_release, self._acting(role), now=self._clock())

    def toggle_document(
        self,
        dossier_id: str,
        doc_id: DocumentId | str,
        role: Role | str | None = None,
    ) -> CommandResult:
        return self._execute(dossier_id, toggle_document, self._acting(role), doc_id)

    def add_comment(self, dossier_id: str, text: str, role: Role | str | None = None) -> CommandResult:
        return self._execute(dossier_id, add_comment, self._acting(role), text, now=self._clock())

    def create_pre_alert(self) -> CommandResult:
        dossier_id = new_dossier_id(item.id for item in self._dossiers)
        dossier = new_pre_alert(
            dossier_id,
            now=self._clock(),
            sla_hours=self._settings.default_sla_hours,
            eta_days=self._settings.pre_alert_eta_days,
        )
        self._dossiers = [dossier, *self._dossiers]
        self._selected_id = dossier.id
        self._repository.save_dossiers(self._dossiers)
        logger.info("pre-alert %s created", dossier.id)
        return CommandResult(ok=True, message="Pre-Alert created", dossier=dossier)

    def reset_to_seed_data(self) -> CommandResult:
        self._dossiers = self._seed()
        self._selected_id = self._dossiers[0].id if self._dossiers else None
        self._repository.save_dossiers(self._dossiers)
        logger.info("dossiers reset to seed data")
        return CommandResult(ok=True, message="Demo data restored")

    def export(self, dossier_id: str, role: Role | str | None = None) -> tuple[str, bytes]:
        dossier = self._find(dossier_id)
        acting = as_role(self._acting(role))
        ensure_permitted(acting, dossier.stage, Action.EXPORT)
        return export_filename(dossier), export_dossier(dossier)

    # ------------------------------------------------------------------
    # read models
    # ------------------------------------------------------------------
    def filter_and_sort(
        self,
        query: str = "",
        stage_filter: str = ALL_STAGES,
        sort_key: SortKey | str = SortKey.ETA_ASC,
    ) -> list[Dossier]:
        return filter_and_sort(self._dossiers, query, stage_filter, sort_key, now=self._clock())

    def worklist_item(self, dossier: Dossier) -> dict[str, object]:
        sla = compute_sla(dossier, self._clock(), at_risk_hours=self._settings.at_risk_hours)
        return {
            "id": dossier.id,
            "supplier": dossier.supplier,
            "warehouse": dossier.warehouse,
            "transport_mode": dossier.transport_mode,
            "forwarder": dossier.forwarder,
            "eta": dossier.eta.isoformat(),
            "stage": dossier.stage.value,
            "responsible": dossier.responsible.value if isinstance(dossier.responsible, Role) else dossier.responsible,
            "sla_hours": sla.display_hours,
            "sla_tone": sla.tone,
            "critical": is_critical(dossier, threshold_hours=self._settings.critical_sla_hours),
        }

    def dossier_view(self, dossier_id: str, role: Role | str | None = None) -> dict[str, object]:
        dossier = self._find(dossier_id)
        acting = as_role(self._acting(role))
        sla = compute_sla(dossier, self._clock(), at_risk_hours=self._settings.at_risk_hours)
        return {
            "dossier": dossier.model_dump(mode="json"),
            "stage": dossier.stage.value,
            "progress": progress_percent(dossier.stage_index),
            "sla": {
                "deadline": sla.deadline.isoformat(),
                "hours_remaining": sla.hours_remaining,
                "tone": sla.tone,
            },
            "checklist": checklist(dossier, acting),
            "missing_for_qf": [doc_id.value for doc_id in missing_for_transition(dossier)],
            "actions": available_actions(dossier, acting),
        }

    # ------------------------------------------------------------------
    # testing helpers
    # ------------------------------------------------------------------
    def reset(self) -> None:
        self._repository.clear()
        self._dossiers = self._seed()
        self._role = self._settings.default_role
        self._selected_id = self._dossiers[0].id if self._dossiers else None


def build_dossier_service(settings: WorkflowSettings | None = None) -> DossierService:
    settings = settings or WorkflowSettings()
    if settings.data_dir is not None:
        store = DirectoryKeyValueStore(settings.data_dir)
    else:
        store = InMemoryKeyValueStore()
    repository = DossierRepository(store, dossiers_key=settings.dossiers_key, role_key=settings.role_key)
    return DossierService(repository, settings)


_service: DossierService | None = None


def configure_dossier_service(service: DossierService) -> None:
    """Install the service used by the HTTP routes."""

    global _service
    _service = service


def get_dossier_service() -> DossierService:
    """Return the process-wide dossier service, building an in-memory one on first use."""

    global _service
    if _service is None:
        _service = build_dossier_service()
    return _service


def reset_dossier_state() -> None:
    """Reset the in-memory store (used in tests)."""

    get_dossier_service().reset()
