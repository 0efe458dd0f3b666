from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field

from importflow.domain import Role


class WorkflowSettings(BaseModel):
    """Tunables for the dossier workflow and its storage keys."""

    dossiers_key: str = "importflow_dossiers_v1"
    role_key: str = "importflow_role"
    default_role: Role = Role.COMEX
    default_sla_hours: float = Field(default=24, gt=0)
    at_risk_hours: float = Field(default=6, ge=0)
    critical_sla_hours: float = 12
    pre_alert_eta_days: int = 15
    data_dir: Path | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "WorkflowSettings":
        overrides: dict[str, object] = {}
        data_dir = os.getenv("IMPORTFLOW_DATA_DIR")
        if data_dir:
            overrides["data_dir"] = Path(data_dir).expanduser().resolve()
        log_level = os.getenv("IMPORTFLOW_LOG_LEVEL")
        if log_level:
            overrides["log_level"] = log_level.strip().upper()
        return cls(**overrides)
