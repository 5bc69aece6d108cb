import logging
from typing import List

from sqlalchemy.orm import Session, selectinload

from orchestrate.errors import ConflictError, NotFound, ValidationError
from orchestrate.models.project import Project, ProjectMember
from orchestrate.models.user import User, UserRole
from orchestrate.permissions import Action, Principal, require
from orchestrate.schemas.project import ProjectCreate, ProjectMemberCreate
from orchestrate.services.membership import sync_member
from orchestrate.utils.dates import to_naive_utc

logger = logging.getLogger(__name__)


def list_projects(db: Session) -> List[Project]:
    return db.query(Project).options(
        selectinload(Project.pm),
        selectinload(Project.tasks),
        selectinload(Project.members).selectinload(ProjectMember.user),
    ).order_by(Project.created_at.desc(), Project.id.desc()).all()


def create_project(db: Session, viewer: Principal, data: ProjectCreate) -> Project:
    """Create a project and make its manager a member."""
    require(viewer, Action.CREATE_PROJECT)
    if data.pm_id is not None and not db.query(User.id).filter(User.id == data.pm_id).first():
        raise ValidationError("Project manager not found")

    project = Project(
        name=data.name,
        description=data.description,
        pm_id=data.pm_id,
        deadline=to_naive_utc(data.deadline),
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("Project #%d '%s' created by user %d", project.id, project.name, viewer.id)

    sync_member(db, project.id, project.pm_id, UserRole.PROJECT_MANAGER)
    return project


def add_project_member(db: Session, viewer: Principal, project_id: int, data: ProjectMemberCreate) -> ProjectMember:
    require(viewer, Action.ADD_PROJECT_MEMBER)

    if not db.query(Project.id).filter(Project.id == project_id).first():
        raise NotFound("Project not found")
    if not db.query(User.id).filter(User.id == data.user_id).first():
        raise NotFound("User not found")

    existing = db.query(ProjectMember).filter(
        ProjectMember.project_id == project_id,
        ProjectMember.user_id == data.user_id,
    ).first()
    if existing:
        raise ConflictError("User is already a member of this project")

    membership = ProjectMember(project_id=project_id, user_id=data.user_id, role=data.role)
    db.add(membership)
    db.commit()
    db.refresh(membership)
    logger.info("User %d added to project %d as %s", data.user_id, project_id, data.role.value)
    return membership
