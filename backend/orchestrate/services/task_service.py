"""Task visibility scopes and write authorization.

Role scopes and caller-supplied filters are always ANDed: a filter can only
narrow what a role may see.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional

from sqlalchemy import and_, false, or_, true
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.sql.elements import ColumnElement

from orchestrate.errors import Forbidden, NotFound, ValidationError
from orchestrate.models.project import Project
from orchestrate.models.task import Task
from orchestrate.models.user import User, UserRole
from orchestrate.permissions import Action, Principal, can, is_manager, require
from orchestrate.schemas.task import TaskCreate, TaskFilters, TaskUpdate
from orchestrate.services.membership import sync_member
from orchestrate.services.updates import ChangeKind, changes_from
from orchestrate.utils.dates import to_naive_utc

logger = logging.getLogger(__name__)

# Fields an assignee may change on their own task
OWNER_FIELDS: FrozenSet[str] = frozenset({
    "status", "actual_hours", "logged_hours", "estimated_hours", "due_date",
})
ALL_FIELDS: FrozenSet[str] = frozenset(TaskUpdate.model_fields)

# Fields that may be cleared to null; clearing any other field keeps its value
NULLABLE_FIELDS: FrozenSet[str] = frozenset({
    "description", "estimated_hours", "actual_hours", "logged_hours", "due_date", "assigned_to_id",
})


@dataclass(frozen=True)
class WriteDecision:
    allowed: bool
    allowed_fields: FrozenSet[str] = frozenset()


def managed_project_ids(db: Session, user_id: int) -> List[int]:
    rows = db.query(Project.id).filter(Project.pm_id == user_id).all()
    return [row.id for row in rows]


def _admin_scope(db: Session, viewer: Principal) -> ColumnElement:
    return true()


def _manager_scope(db: Session, viewer: Principal) -> ColumnElement:
    project_ids = managed_project_ids(db, viewer.id)
    # No managed projects must match nothing, never everything
    managed = Task.project_id.in_(project_ids) if project_ids else false()
    return or_(managed, Task.assigned_to_id == viewer.id)


def _developer_scope(db: Session, viewer: Principal) -> ColumnElement:
    return Task.assigned_to_id == viewer.id


def _no_scope(db: Session, viewer: Principal) -> ColumnElement:
    raise Forbidden()


_SCOPES: Dict[UserRole, Callable[[Session, Principal], ColumnElement]] = {
    UserRole.ADMIN: _admin_scope,
    UserRole.PROJECT_MANAGER: _manager_scope,
    UserRole.DEVELOPER: _developer_scope,
    UserRole.STAFF: _no_scope,
    UserRole.PUBLIC: _no_scope,
}

_missing = set(UserRole) - set(_SCOPES)
if _missing:
    raise RuntimeError(f"Roles without a task scope: {sorted(r.value for r in _missing)}")


def task_scope(db: Session, viewer: Principal) -> ColumnElement:
    """Return the clause selecting every task ``viewer`` may read."""
    return _SCOPES[viewer.role](db, viewer)


def filter_clauses(filters: TaskFilters) -> List[ColumnElement]:
    clauses = []
    if filters.project_id is not None:
        clauses.append(Task.project_id == filters.project_id)
    if filters.assignee_id is not None:
        clauses.append(Task.assigned_to_id == filters.assignee_id)
    if filters.status is not None:
        clauses.append(Task.status == filters.status)
    if filters.priority is not None:
        clauses.append(Task.priority == filters.priority)
    if filters.search:
        clauses.append(or_(
            Task.title.icontains(filters.search, autoescape=True),
            Task.description.icontains(filters.search, autoescape=True),
        ))
    return clauses


def can_write(viewer: Principal, task: Task, fields: Iterable[str]) -> WriteDecision:
    """Decide which of ``fields`` ``viewer`` may change on ``task``."""
    is_owner = task.assigned_to_id is not None and task.assigned_to_id == viewer.id
    manager = is_manager(viewer)
    if not (is_owner or manager):
        return WriteDecision(allowed=False)

    permitted = ALL_FIELDS if manager else OWNER_FIELDS
    return WriteDecision(allowed=True, allowed_fields=frozenset(fields) & permitted)


def _get_task(db: Session, task_id: int) -> Task:
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        raise NotFound("Task not found")
    return task


def _validate_references(db: Session, project_id: Optional[int], assignee_id: Optional[int]) -> None:
    if project_id is not None and not db.query(Project.id).filter(Project.id == project_id).first():
        raise ValidationError("Project not found")
    if assignee_id is not None and not db.query(User.id).filter(User.id == assignee_id).first():
        raise ValidationError("Assignee not found")


def list_tasks(db: Session, viewer: Principal, filters: Optional[TaskFilters] = None) -> List[Task]:
    require(viewer, Action.LIST_TASKS)
    clauses = [task_scope(db, viewer)]
    if filters is not None:
        clauses.extend(filter_clauses(filters))

    return db.query(Task).options(
        joinedload(Task.project),
        joinedload(Task.assigned_to),
        joinedload(Task.created_by),
    ).filter(and_(*clauses)).order_by(Task.created_at.desc(), Task.id.desc()).all()


def create_task(db: Session, viewer: Principal, data: TaskCreate) -> Task:
    require(viewer, Action.CREATE_TASK)
    _validate_references(db, data.project_id, data.assigned_to_id)

    task = Task(
        title=data.title,
        description=data.description,
        priority=data.priority,
        estimated_hours=data.estimated_hours,
        due_date=to_naive_utc(data.due_date),
        project_id=data.project_id,
        assigned_to_id=data.assigned_to_id,
        created_by_id=viewer.id,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("Task #%d created in project %d by user %d", task.id, task.project_id, viewer.id)

    sync_member(db, task.project_id, task.assigned_to_id, UserRole.DEVELOPER)
    return task


def update_task(db: Session, viewer: Principal, task_id: int, data: TaskUpdate) -> Task:
    """Apply a partial update within the fields ``viewer`` may change.

    Fields outside the caller's permission are ignored, not rejected.
    """
    task = _get_task(db, task_id)
    changes = changes_from(data)
    sent = [name for name, change in changes.items() if change.kind is not ChangeKind.UNCHANGED]

    decision = can_write(viewer, task, sent)
    if not decision.allowed:
        raise Forbidden()

    ignored = set(sent) - decision.allowed_fields
    if ignored:
        logger.info("Ignoring %s on task #%d for user %d", sorted(ignored), task.id, viewer.id)

    updates = {}
    for name in decision.allowed_fields:
        value = changes[name].resolve(getattr(task, name), nullable=name in NULLABLE_FIELDS)
        updates[name] = to_naive_utc(value) if name == "due_date" else value

    _validate_references(db, updates.get("project_id"), updates.get("assigned_to_id"))
    for name, value in updates.items():
        setattr(task, name, value)
    db.commit()
    db.refresh(task)
    logger.info("Task #%d updated by user %d", task.id, viewer.id)

    if can(viewer, Action.MANAGE_TASK) and task.assigned_to_id:
        sync_member(db, task.project_id, task.assigned_to_id, UserRole.DEVELOPER)
    return task


def delete_task(db: Session, viewer: Principal, task_id: int) -> None:
    task = _get_task(db, task_id)
    require(viewer, Action.DELETE_TASK, "Forbidden: Only Admins or Project Managers can delete tasks")

    db.delete(task)
    db.commit()
    logger.info("Task #%d deleted by user %d", task_id, viewer.id)
