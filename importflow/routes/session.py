from __future__ import annotations

from fastapi import APIRouter, HTTPException

from importflow.application import get_dossier_service
from importflow.core.validation import WorkflowError
from importflow.domain import Role

router = APIRouter(prefix="/session", tags=["session"])


@router.get("/role")
async def get_role() -> dict:
    service = get_dossier_service()
    return {"role": service.role.value, "roles": [role.value for role in Role]}


@router.put("/role")
async def set_role(payload: dict) -> dict:
    role = payload.get("role")
    if not role:
        raise HTTPException(status_code=400, detail="role is required")
    try:
        selected = get_dossier_service().set_role(role)
    except WorkflowError as exc:
        raise HTTPException(status_code=400, detail=exc.detail) from exc
    return {"role": selected.value}
