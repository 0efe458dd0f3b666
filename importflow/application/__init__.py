"""Application services."""

from .dossiers import (
    CommandResult,
    DossierService,
    Failure,
    build_dossier_service,
    configure_dossier_service,
    get_dossier_service,
    reset_dossier_state,
)

__all__ = [
    "CommandResult",
    "DossierService",
    "Failure",
    "build_dossier_service",
    "configure_dossier_service",
    "get_dossier_service",
    "reset_dossier_state",
]
