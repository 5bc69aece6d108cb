from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from orchestrate.database import get_db
from orchestrate.dependencies import get_current_principal
from orchestrate.models.task import Task
from orchestrate.permissions import Principal
from orchestrate.schemas.task import TaskCreate, TaskUpdate, TaskFilters
from orchestrate.services import task_service
from orchestrate.services.workload import compute_workload

router = APIRouter()


def _user_summary(user):
    if not user:
        return None
    return {"id": user.id, "name": user.name, "email": user.email}


def task_to_dict(t: Task) -> dict:
    return {
        "id": t.id,
        "title": t.title,
        "description": t.description,
        "status": t.status.value,
        "priority": t.priority.value,
        "estimated_hours": t.estimated_hours,
        "actual_hours": t.actual_hours,
        "logged_hours": t.logged_hours,
        "due_date": t.due_date.isoformat() if t.due_date else None,
        "project_id": t.project_id,
        "project": {
            "id": t.project.id,
            "name": t.project.name,
            "pm_id": t.project.pm_id
        } if t.project else None,
        "assigned_to_id": t.assigned_to_id,
        "assigned_to": _user_summary(t.assigned_to),
        "created_by_id": t.created_by_id,
        "created_by": _user_summary(t.created_by),
        "created_at": t.created_at.isoformat() if t.created_at else None,
        "updated_at": t.updated_at.isoformat() if t.updated_at else None
    }


@router.get("/workload")
def get_workload(viewer: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    """Get developer workload overview"""
    return [w.to_dict() for w in compute_workload(db, viewer)]


@router.get("/")
def get_tasks(
    filters: TaskFilters = Depends(),
    viewer: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Get tasks visible to the caller"""
    return [task_to_dict(t) for t in task_service.list_tasks(db, viewer, filters)]


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_task(
    data: TaskCreate,
    viewer: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Create task"""
    return task_to_dict(task_service.create_task(db, viewer, data))


@router.patch("/{task_id}")
def update_task(
    task_id: int,
    data: TaskUpdate,
    viewer: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Update task - assignees may only change status, hours and due date"""
    return task_to_dict(task_service.update_task(db, viewer, task_id, data))


@router.delete("/{task_id}")
def delete_task(
    task_id: int,
    viewer: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Delete task"""
    task_service.delete_task(db, viewer, task_id)
    return {"success": True, "message": "Task deleted successfully"}
