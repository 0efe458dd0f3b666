from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest
from pydantic import ValidationError as SchemaError

from importflow.core.query import filter_and_sort
from importflow.core.seed import seed_dossiers
from importflow.core.state_machine import add_comment, record_receipt, schedule_entry
from importflow.domain import Role
from importflow.exporters.dossier_json import export_dossier, export_filename, import_dossier
from importflow.infrastructure import DirectoryKeyValueStore, DossierRepository, InMemoryKeyValueStore

NOW = datetime(2025, 8, 1, 12, 0, tzinfo=timezone.utc)


def _repository(store) -> DossierRepository:
    return DossierRepository(store, dossiers_key="dossiers", role_key="role")


def _strip_offsets(raw: bytes) -> bytes:
    stripped, count = re.subn(rb"(T\d{2}:\d{2}:\d{2}(?:\.\d+)?)(?:Z|[+-]\d{2}:\d{2})", rb"\1", raw)
    assert count > 0
    return stripped


def test_absent_collection_falls_back_to_seed():
    repository = _repository(InMemoryKeyValueStore())
    loaded = repository.load_dossiers(lambda: seed_dossiers(NOW))
    assert [item.id for item in loaded] == ["IMP-24097", "IMP-24122", "IMP-24160"]


@pytest.mark.parametrize("raw", [b"not json", b'{"id": 1}', b'[{"id": "IMP-1"}]'])
def test_unreadable_collection_falls_back_to_seed(raw):
    repository = _repository(InMemoryKeyValueStore({"dossiers": raw}))
    loaded = repository.load_dossiers(lambda: seed_dossiers(NOW))
    assert len(loaded) == 3


def test_collection_round_trips_through_store():
    store = InMemoryKeyValueStore()
    repository = _repository(store)
    dossiers = seed_dossiers(NOW)
    repository.save_dossiers(dossiers)
    assert json.loads(store.get("dossiers"))[0]["id"] == "IMP-24097"
    assert repository.load_dossiers(list) == dossiers


def test_role_defaults_and_persists():
    store = InMemoryKeyValueStore()
    repository = _repository(store)
    assert repository.load_role(Role.COMEX) is Role.COMEX
    repository.save_role(Role.QF)
    assert repository.load_role(Role.COMEX) is Role.QF
    store.set("role", b'"Admin"')
    assert repository.load_role(Role.COMEX) is Role.COMEX


def test_offset_less_timestamps_fall_back_to_seed():
    store = InMemoryKeyValueStore()
    repository = _repository(store)
    repository.save_dossiers(seed_dossiers(NOW))
    naive = _strip_offsets(store.get("dossiers"))
    store.set("dossiers", naive)

    loaded = repository.load_dossiers(lambda: seed_dossiers(NOW))
    assert all(item.stage_entered_at.tzinfo is not None for item in loaded)
    assert all(entry.timestamp.tzinfo is not None for item in loaded for entry in item.history)
    assert [item.id for item in filter_and_sort(loaded, sort_key="sla_asc", now=NOW)] == [
        "IMP-24122",
        "IMP-24160",
        "IMP-24097",
    ]


def test_offset_less_export_is_rejected():
    payload = _strip_offsets(export_dossier(seed_dossiers(NOW)[0]))
    with pytest.raises(SchemaError):
        import_dossier(payload)


def test_directory_store_writes_one_file_per_key(tmp_path):
    store = DirectoryKeyValueStore(tmp_path / "data")
    repository = _repository(store)
    repository.save_dossiers(seed_dossiers(NOW))
    repository.save_role(Role.OPERATIONS)
    assert (tmp_path / "data" / "dossiers.json").exists()
    assert _repository(DirectoryKeyValueStore(tmp_path / "data")).load_role(Role.COMEX) is Role.OPERATIONS
    repository.clear()
    assert store.get("dossiers") is None


def test_directory_store_rejects_path_like_keys(tmp_path):
    store = DirectoryKeyValueStore(tmp_path)
    with pytest.raises(ValueError):
        store.set("../escape", b"x")


def test_export_round_trip_keeps_stage_documents_and_history():
    dossier = seed_dossiers(NOW)[2]
    dossier = schedule_entry(dossier, Role.OPERATIONS, now=NOW).dossier
    dossier = record_receipt(
        dossier,
        Role.OPERATIONS,
        {"lot": "L1", "expiry": "2025-12", "quantity": 100, "cold_chain": True},
        now=NOW,
    ).dossier
    dossier = add_comment(dossier, Role.QF, "check temperature log", now=NOW).dossier

    payload = export_dossier(dossier)
    assert export_filename(dossier) == "IMP-24160.json"
    assert payload.startswith(b"{\n  ")

    restored = import_dossier(payload)
    assert restored.stage_index == dossier.stage_index
    assert restored.documents == dossier.documents
    assert len(restored.history) == len(dossier.history)
    assert restored == dossier
