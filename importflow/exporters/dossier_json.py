from __future__ import annotations

from importflow.domain import Dossier


def export_filename(dossier: Dossier) -> str:
    return f"{dossier.id}.json"


def export_dossier(dossier: Dossier) -> bytes:
    """Pretty-printed JSON document for a single dossier."""

    return dossier.model_dump_json(indent=2).encode("utf-8")


def import_dossier(payload: bytes | str) -> Dossier:
    return Dossier.model_validate_json(payload)
