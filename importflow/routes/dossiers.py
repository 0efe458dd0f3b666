from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import Response

from importflow.application import CommandResult, get_dossier_service
from importflow.core.validation import DossierNotFoundError, WorkflowError

router = APIRouter(prefix="/dossiers", tags=["dossiers"])

STATUS_BY_KIND = {
    "validation": 400,
    "authorization": 403,
    "not_found": 404,
    "precondition": 409,
}


def _respond(result: CommandResult) -> dict:
    if not result.ok:
        payload = result.as_dict()
        raise HTTPException(status_code=STATUS_BY_KIND.get(result.error.kind, 400), detail=payload["error"])
    return result.as_dict()


def _http_error(exc: DossierNotFoundError | WorkflowError) -> HTTPException:
    if isinstance(exc, DossierNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(
        status_code=STATUS_BY_KIND.get(exc.kind, 400),
        detail={"kind": exc.kind, "detail": exc.detail, "missing": exc.missing},
    )


@router.get("")
async def list_dossiers(
    q: str = Query(default=""),
    stage: str = Query(default="all"),
    sort: str = Query(default="eta_asc"),
) -> dict:
    service = get_dossier_service()
    try:
        items = service.filter_and_sort(q, stage, sort)
    except WorkflowError as exc:
        raise _http_error(exc) from exc
    return {"items": [service.worklist_item(item) for item in items], "selected": service.selected_id}


@router.post("")
async def create_pre_alert() -> dict:
    return _respond(get_dossier_service().create_pre_alert())


@router.post("/reset")
async def reset_to_seed_data() -> dict:
    return _respond(get_dossier_service().reset_to_seed_data())


@router.get("/{dossier_id}")
async def get_dossier(dossier_id: str, role: str | None = Query(default=None)) -> dict:
    service = get_dossier_service()
    try:
        return service.dossier_view(dossier_id, role)
    except (DossierNotFoundError, WorkflowError) as exc:
        raise _http_error(exc) from exc


@router.post("/{dossier_id}/select")
async def select_dossier(dossier_id: str) -> dict:
    service = get_dossier_service()
    try:
        dossier = service.select(dossier_id)
    except DossierNotFoundError as exc:
        raise _http_error(exc) from exc
    return {"selected": dossier.id}


@router.get("/{dossier_id}/export")
async def export_dossier(dossier_id: str, role: str | None = Query(default=None)) -> Response:
    service = get_dossier_service()
    try:
        filename, body = service.export(dossier_id, role)
    except (DossierNotFoundError, WorkflowError) as exc:
        raise _http_error(exc) from exc
    return Response(
        content=body,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/{dossier_id}/submit-pre-alert")
async def submit_pre_alert(dossier_id: str, payload: dict | None = None) -> dict:
    role = (payload or {}).get("role")
    return _respond(get_dossier_service().submit_pre_alert(dossier_id, role))


@router.post("/{dossier_id}/send-to-qf")
async def send_to_qf(dossier_id: str, payload: dict | None = None) -> dict:
    role = (payload or {}).get("role")
    return _respond(get_dossier_service().send_to_qf(dossier_id, role))


@router.post("/{dossier_id}/approve-qf")
async def approve_qf(dossier_id: str, payload: dict | None = None) -> dict:
    role = (payload or {}).get("role")
    return _respond(get_dossier_service().approve_qf(dossier_id, role))


@router.post("/{dossier_id}/observe-qf")
async def observe_qf(dossier_id: str, payload: dict | None = None) -> dict:
    role = (payload or {}).get("role")
    return _respond(get_dossier_service().observe_qf(dossier_id, role))


@router.post("/{dossier_id}/schedule-entry")
async def schedule_entry(dossier_id: str, payload: dict | None = None) -> dict:
    role = (payload or {}).get("role")
    return _respond(get_dossier_service().schedule_entry(dossier_id, role))


@router.post("/{dossier_id}/receipts")
async def record_receipt(dossier_id: str, payload: dict) -> dict:
    record = dict(payload)
    role = record.pop("role", None)
    return _respond(get_dossier_service().record_receipt(dossier_id, record, role))


@router.post("/{dossier_id}/final-release")
async def final_release(dossier_id: str, payload: dict | None = None) -> dict:
    role = (payload or {}).get("role")
    return _respond(get_dossier_service().final_release(dossier_id, role))


@router.post("/{dossier_id}/documents/{doc_id}/toggle")
async def toggle_document(dossier_id: str, doc_id: str, payload: dict | None = None) -> dict:
    role = (payload or {}).get("role")
    return _respond(get_dossier_service().toggle_document(dossier_id, doc_id, role))


@router.post("/{dossier_id}/comments")
async def add_comment(dossier_id: str, payload: dict) -> dict:
    text = payload.get("text")
    if not isinstance(text, str):
        raise HTTPException(status_code=400, detail="text is required")
    return _respond(get_dossier_service().add_comment(dossier_id, text, payload.get("role")))
