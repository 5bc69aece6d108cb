import enum
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Query, Session

from orchestrate.models.task import Task, TaskStatus
from orchestrate.models.user import User, UserRole
from orchestrate.permissions import Principal
from orchestrate.services.task_service import managed_project_ids

logger = logging.getLogger(__name__)

# Active-task counts at which a developer turns YELLOW / RED
YELLOW_THRESHOLD = 4
RED_THRESHOLD = 7


class WorkloadIntensity(str, enum.Enum):
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"


@dataclass
class DeveloperWorkload:
    id: int
    name: str
    email: str
    active_tasks: List[Task] = field(default_factory=list)

    @property
    def active_tasks_count(self) -> int:
        return len(self.active_tasks)

    @property
    def estimated_hours_total(self) -> float:
        return sum(t.estimated_hours or 0 for t in self.active_tasks)

    @property
    def actual_hours_total(self) -> float:
        return sum(t.actual_hours or 0 for t in self.active_tasks)

    @property
    def workload_intensity(self) -> WorkloadIntensity:
        return classify_intensity(self.active_tasks_count)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "tasks_assigned": [
                {
                    "id": t.id,
                    "title": t.title,
                    "priority": t.priority.value,
                    "status": t.status.value,
                    "estimated_hours": t.estimated_hours,
                    "actual_hours": t.actual_hours,
                }
                for t in self.active_tasks
            ],
            "active_tasks_count": self.active_tasks_count,
            "estimated_hours_total": self.estimated_hours_total,
            "actual_hours_total": self.actual_hours_total,
            "workload_intensity": self.workload_intensity.value,
        }


def classify_intensity(active_tasks_count: int) -> WorkloadIntensity:
    if active_tasks_count >= RED_THRESHOLD:
        return WorkloadIntensity.RED
    if active_tasks_count >= YELLOW_THRESHOLD:
        return WorkloadIntensity.YELLOW
    return WorkloadIntensity.GREEN


def _all_developers(db: Session, viewer: Principal) -> Optional[Query]:
    return db.query(User).filter(User.role == UserRole.DEVELOPER)


def _managed_developers(db: Session, viewer: Principal) -> Optional[Query]:
    project_ids = managed_project_ids(db, viewer.id)
    if not project_ids:
        return None
    return db.query(User).filter(
        User.role == UserRole.DEVELOPER,
        User.tasks_assigned.any(Task.project_id.in_(project_ids)),
    )


def _self_only(db: Session, viewer: Principal) -> Optional[Query]:
    return db.query(User).filter(User.id == viewer.id, User.role == UserRole.DEVELOPER)


def _nobody(db: Session, viewer: Principal) -> Optional[Query]:
    return None


_DEVELOPER_SCOPES: Dict[UserRole, Callable[[Session, Principal], Optional[Query]]] = {
    UserRole.ADMIN: _all_developers,
    UserRole.PROJECT_MANAGER: _managed_developers,
    UserRole.DEVELOPER: _self_only,
    UserRole.STAFF: _nobody,
    UserRole.PUBLIC: _nobody,
}

_missing = set(UserRole) - set(_DEVELOPER_SCOPES)
if _missing:
    raise RuntimeError(f"Roles without a workload scope: {sorted(r.value for r in _missing)}")


def compute_workload(db: Session, viewer: Principal) -> List[DeveloperWorkload]:
    """Per-developer load over active (not DONE) tasks, scoped to ``viewer``."""
    query = _DEVELOPER_SCOPES[viewer.role](db, viewer)
    if query is None:
        return []

    developers = query.order_by(User.name, User.id).all()
    if not developers:
        return []

    active = db.query(Task).filter(
        Task.assigned_to_id.in_([d.id for d in developers]),
        Task.status != TaskStatus.DONE,
    ).order_by(Task.id).all()

    by_assignee = defaultdict(list)
    for task in active:
        by_assignee[task.assigned_to_id].append(task)

    logger.debug("Workload computed for %d developer(s) as user %d", len(developers), viewer.id)
    return [
        DeveloperWorkload(id=d.id, name=d.name, email=d.email, active_tasks=by_assignee[d.id])
        for d in developers
    ]
