from __future__ import annotations

from importflow.core.validation import ValidationError
from importflow.domain import Stage

STAGES: tuple[Stage, ...] = tuple(Stage)
INITIAL_INDEX = 0
TERMINAL_INDEX = len(STAGES) - 1


def stage_count() -> int:
    return len(STAGES)


def stage_name(index: int) -> Stage:
    if not 0 <= index < len(STAGES):
        raise ValidationError(f"unknown stage index {index}", missing=["stage"])
    return STAGES[index]


def stage_index(name: str | Stage) -> int:
    try:
        return STAGES.index(Stage(name))
    except ValueError as exc:
        raise ValidationError(f"unknown stage {name!r}", missing=["stage"]) from exc


def is_terminal(index: int) -> bool:
    return index == TERMINAL_INDEX


def progress_percent(index: int) -> int:
    """Share of the workflow reached, counting the current stage."""

    return round((index + 1) / len(STAGES) * 100)
