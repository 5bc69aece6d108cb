from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from orchestrate.database import get_db
from orchestrate.dependencies import get_current_principal
from orchestrate.models.project import Project, ProjectMember
from orchestrate.permissions import Principal
from orchestrate.schemas.project import ProjectCreate, ProjectMemberCreate
from orchestrate.services import project_service

router = APIRouter()


def member_to_dict(m: ProjectMember) -> dict:
    return {
        "id": m.id,
        "project_id": m.project_id,
        "user_id": m.user_id,
        "role": m.role.value,
        "user": {
            "id": m.user.id,
            "name": m.user.name,
            "email": m.user.email,
            "role": m.user.role.value
        } if m.user else None
    }


def project_to_dict(p: Project) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "description": p.description,
        "status": p.status.value,
        "deadline": p.deadline.isoformat() if p.deadline else None,
        "pm_id": p.pm_id,
        "pm": {
            "id": p.pm.id,
            "name": p.pm.name,
            "email": p.pm.email
        } if p.pm else None,
        "counts": {
            "tasks": len(p.tasks),
            "members": len(p.members)
        },
        "members": [member_to_dict(m) for m in p.members],
        "created_at": p.created_at.isoformat() if p.created_at else None
    }


@router.get("/")
def get_projects(viewer: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    """Get all projects with their members"""
    return [project_to_dict(p) for p in project_service.list_projects(db)]


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_project(
    data: ProjectCreate,
    viewer: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Create project"""
    project = project_service.create_project(db, viewer, data)
    return project_to_dict(project)


@router.post("/{project_id}/members", status_code=status.HTTP_201_CREATED)
def add_project_member(
    project_id: int,
    data: ProjectMemberCreate,
    viewer: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Add a member to a project"""
    membership = project_service.add_project_member(db, viewer, project_id, data)
    return member_to_dict(membership)
