from __future__ import annotations

from datetime import date, datetime, timezone
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest

from importflow.core.query import filter_and_sort
from importflow.core.seed import seed_dossiers
from importflow.core.validation import ValidationError

NOW = datetime(2025, 8, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def dossiers():
    return seed_dossiers(NOW)


def test_sort_by_eta_ascending(dossiers):
    result = filter_and_sort(dossiers, sort_key="eta_asc", now=NOW)
    assert [item.eta for item in result] == [date(2025, 8, 30), date(2025, 9, 21), date(2025, 10, 5)]


def test_sort_by_eta_descending(dossiers):
    result = filter_and_sort(dossiers, sort_key="eta_desc", now=NOW)
    assert [item.id for item in result] == ["IMP-24160", "IMP-24097", "IMP-24122"]


def test_sort_by_sla_remaining(dossiers):
    asc = filter_and_sort(dossiers, sort_key="sla_asc", now=NOW)
    assert [item.id for item in asc] == ["IMP-24122", "IMP-24160", "IMP-24097"]
    desc = filter_and_sort(dossiers, sort_key="sla_desc", now=NOW)
    assert [item.id for item in desc] == ["IMP-24097", "IMP-24160", "IMP-24122"]


def test_query_is_case_insensitive_over_listed_fields(dossiers):
    assert [item.id for item in filter_and_sort(dossiers, "PHARMA", now=NOW)] == ["IMP-24097"]
    assert [item.id for item in filter_and_sort(dossiers, "k+n", now=NOW)] == ["IMP-24122"]
    assert {item.id for item in filter_and_sort(dossiers, "sea", now=NOW)} == {"IMP-24097", "IMP-24160"}
    assert filter_and_sort(dossiers, "CIF", now=NOW) == []


def test_stage_filter(dossiers):
    result = filter_and_sort(dossiers, stage_filter="QF Review", now=NOW)
    assert [item.id for item in result] == ["IMP-24097"]
    assert len(filter_and_sort(dossiers, stage_filter="all", now=NOW)) == 3


def test_unknown_filter_values_are_rejected(dossiers):
    with pytest.raises(ValidationError):
        filter_and_sort(dossiers, stage_filter="Customs", now=NOW)
    with pytest.raises(ValidationError):
        filter_and_sort(dossiers, sort_key="supplier", now=NOW)


def test_input_is_not_mutated_and_ties_keep_order(dossiers):
    original = list(dossiers)
    twins = [item.model_copy(update={"eta": date(2025, 9, 1)}) for item in dossiers]
    assert [item.id for item in filter_and_sort(twins, sort_key="eta_asc", now=NOW)] == [
        item.id for item in twins
    ]
    assert [item.id for item in filter_and_sort(twins, sort_key="eta_desc", now=NOW)] == [
        item.id for item in twins
    ]
    filter_and_sort(dossiers, sort_key="eta_desc", now=NOW)
    assert dossiers == original
