from __future__ import annotations


class WorkflowError(Exception):
    """Base class for rejected workflow commands.

    ``missing`` names exactly which requirement failed (document ids,
    receiving field names or the rejected action).
    """

    kind = "workflow"

    def __init__(self, detail: str, *, missing: list[str] | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.missing = list(missing or [])


class ValidationError(WorkflowError):
    """Raised when command input is missing or malformed."""

    kind = "validation"


class PreconditionError(WorkflowError):
    """Raised when a stage gate is not satisfied."""

    kind = "precondition"


class AuthorizationError(WorkflowError):
    """Raised when the acting role may not perform the action at this stage."""

    kind = "authorization"


class DossierNotFoundError(LookupError):
    """Raised when no dossier carries the requested id."""

    def __init__(self, dossier_id: str) -> None:
        super().__init__(f"dossier {dossier_id} not found")
        self.dossier_id = dossier_id
