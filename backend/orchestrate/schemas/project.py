from typing import Optional
from datetime import datetime
from orchestrate.models.user import UserRole
from orchestrate.schemas.common import BlankAsNullModel


class ProjectCreate(BlankAsNullModel):
    name: str
    description: Optional[str] = None
    pm_id: Optional[int] = None
    deadline: Optional[datetime] = None


class ProjectMemberCreate(BlankAsNullModel):
    user_id: int
    role: UserRole = UserRole.DEVELOPER
