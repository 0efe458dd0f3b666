"""
Role to action authorization for dossier commands.

Keep policy decisions here only; the state machine re-checks every command
against this table before touching a dossier.
"""
from __future__ import annotations

from enum import Enum

from importflow.core.validation import AuthorizationError, ValidationError
from importflow.domain import Role, Stage


class Action(str, Enum):
    SUBMIT_PRE_ALERT = "submit_pre_alert"
    SEND_TO_QF = "send_to_qf"
    APPROVE_QF = "approve_qf"
    OBSERVE_QF = "observe_qf"
    SCHEDULE_ENTRY = "schedule_entry"
    RECORD_RECEIPT = "record_receipt"
    FINAL_RELEASE = "final_release"
    EXPORT = "export"
    ADD_COMMENT = "add_comment"


STAGE_ACTIONS: dict[Stage, dict[Role, set[Action]]] = {
    Stage.PRE_ALERT: {
        Role.COMEX: {Action.SUBMIT_PRE_ALERT},
    },
    Stage.COMEX_REVIEW: {
        Role.COMEX: {Action.SEND_TO_QF},
    },
    Stage.QF_REVIEW: {
        Role.QF: {Action.APPROVE_QF, Action.OBSERVE_QF},
    },
    Stage.ENTRY_SCHEDULING: {
        Role.OPERATIONS: {Action.SCHEDULE_ENTRY},
    },
    Stage.ARRIVAL_RECEIVING: {
        Role.QF: {Action.FINAL_RELEASE},
        Role.OPERATIONS: {Action.RECORD_RECEIPT},
    },
}

# available to every role at every stage
UNIVERSAL_ACTIONS: frozenset[Action] = frozenset({Action.EXPORT, Action.ADD_COMMENT})


def permitted_actions(role: Role, stage: Stage) -> set[Action]:
    allowed = set(STAGE_ACTIONS.get(stage, {}).get(role, set()))
    allowed.update(UNIVERSAL_ACTIONS)
    return allowed


def is_permitted(role: Role, stage: Stage, action: Action) -> bool:
    return action in permitted_actions(role, stage)


def required_roles(stage: Stage, action: Action) -> list[Role]:
    return [role for role in Role if is_permitted(role, stage, action)]


def ensure_permitted(role: Role, stage: Stage, action: Action) -> None:
    if is_permitted(role, stage, action):
        return
    required = ", ".join(r.value for r in required_roles(stage, action)) or "none"
    raise AuthorizationError(
        f"Role {role.value} cannot {action.value} at stage {stage.value}. Required: {required}",
        missing=[action.value],
    )


def as_role(value: Role | str) -> Role:
    """Reject role names outside the closed set at the boundary."""

    if isinstance(value, Role):
        return value
    try:
        return Role(str(value).strip())
    except ValueError:
        raise ValidationError(f"Unknown role {value!r}", missing=["role"]) from None
