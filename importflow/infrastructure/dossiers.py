"""Infrastructure layer for dossier persistence."""
from __future__ import annotations

import json
import logging
from typing import Callable

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from importflow.domain import Dossier, Role
from importflow.infrastructure.storage import KeyValueStore

logger = logging.getLogger(__name__)

_COLLECTION = TypeAdapter(list[Dossier])


class DossierRepository:
    """Reads and writes the dossier collection and the selected role.

    Absent or unreadable values fall back to the supplied defaults instead
    of failing start-up.
    """

    def __init__(self, store: KeyValueStore, *, dossiers_key: str, role_key: str) -> None:
        self._store = store
        self._dossiers_key = dossiers_key
        self._role_key = role_key

    def load_dossiers(self, fallback: Callable[[], list[Dossier]]) -> list[Dossier]:
        raw = self._store.get(self._dossiers_key)
        if raw is None:
            logger.info("no stored dossiers under %s, using seed data", self._dossiers_key)
            return fallback()
        try:
            return _COLLECTION.validate_json(raw)
        except SchemaError as exc:
            logger.warning("stored dossiers unreadable (%s errors), using seed data", exc.error_count())
            return fallback()

    def save_dossiers(self, dossiers: list[Dossier]) -> None:
        self._store.set(self._dossiers_key, _COLLECTION.dump_json(dossiers))

    def load_role(self, default: Role) -> Role:
        raw = self._store.get(self._role_key)
        if raw is None:
            return default
        try:
            return Role(json.loads(raw))
        except (ValueError, TypeError):
            logger.warning("stored role unreadable, using %s", default.value)
            return default

    def save_role(self, role: Role) -> None:
        self._store.set(self._role_key, json.dumps(role.value).encode("utf-8"))

    def clear(self) -> None:
        self._store.delete(self._dossiers_key)
        self._store.delete(self._role_key)
