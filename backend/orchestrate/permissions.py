"""Role permission table.

Every role must appear in ``PERMISSIONS``; the check at the bottom of this
module fails at import time when a role is added without an entry.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from orchestrate.errors import Forbidden
from orchestrate.models.user import UserRole


@dataclass(frozen=True)
class Principal:
    """An authenticated actor as seen by the rule engine."""

    id: int
    role: UserRole


class Action(str, enum.Enum):
    LIST_TASKS = "list_tasks"
    CREATE_TASK = "create_task"
    MANAGE_TASK = "manage_task"
    DELETE_TASK = "delete_task"
    CREATE_PROJECT = "create_project"
    ADD_PROJECT_MEMBER = "add_project_member"
    MANAGE_BOOKINGS = "manage_bookings"
    MANAGE_USERS = "manage_users"


_MANAGER_ACTIONS = frozenset({
    Action.LIST_TASKS,
    Action.CREATE_TASK,
    Action.MANAGE_TASK,
    Action.DELETE_TASK,
    Action.CREATE_PROJECT,
    Action.ADD_PROJECT_MEMBER,
    Action.MANAGE_BOOKINGS,
})

PERMISSIONS: Dict[UserRole, FrozenSet[Action]] = {
    UserRole.ADMIN: _MANAGER_ACTIONS | {Action.MANAGE_USERS},
    UserRole.PROJECT_MANAGER: _MANAGER_ACTIONS,
    UserRole.DEVELOPER: frozenset({Action.LIST_TASKS}),
    UserRole.STAFF: frozenset(),
    UserRole.PUBLIC: frozenset(),
}

MANAGER_TIER: FrozenSet[UserRole] = frozenset({UserRole.ADMIN, UserRole.PROJECT_MANAGER})


def can(principal: Optional[Principal], action: Action) -> bool:
    if principal is None:
        return False
    return action in PERMISSIONS[principal.role]


def require(principal: Optional[Principal], action: Action, message: str = "Forbidden") -> Principal:
    if not can(principal, action):
        raise Forbidden(message)
    return principal


def is_manager(principal: Optional[Principal]) -> bool:
    return principal is not None and principal.role in MANAGER_TIER


_missing = set(UserRole) - set(PERMISSIONS)
if _missing:
    raise RuntimeError(f"Roles without a permission entry: {sorted(r.value for r in _missing)}")
