from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from orchestrate.models.task import TaskStatus, TaskPriority
from orchestrate.schemas.common import BlankAsNullModel


class TaskCreate(BlankAsNullModel):
    title: str
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    estimated_hours: Optional[float] = None
    due_date: Optional[datetime] = None
    project_id: int
    assigned_to_id: Optional[int] = None


class TaskUpdate(BlankAsNullModel):
    """Partial update; fields not sent are left unchanged."""

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    logged_hours: Optional[float] = None
    due_date: Optional[datetime] = None
    project_id: Optional[int] = None
    assigned_to_id: Optional[int] = None


class TaskFilters(BaseModel):
    project_id: Optional[int] = None
    assignee_id: Optional[int] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    search: Optional[str] = None
