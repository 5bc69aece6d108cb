"""Project membership synchronization.

``ProjectMember`` rows are derived from a project's manager and its task
assignees. They are reconciled on the write path right after the mutation
that changed ``pm_id`` or ``assigned_to_id``, never by rescanning on reads.
Sync is best-effort: failures are logged and swallowed so the triggering
operation still succeeds.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from orchestrate.models.project import ProjectMember
from orchestrate.models.user import UserRole

logger = logging.getLogger(__name__)


def sync_member(db: Session, project_id: int, user_id: Optional[int], role: UserRole = UserRole.DEVELOPER) -> None:
    """Ensure ``user_id`` is a member of ``project_id``.

    Inserts a row tagged with ``role`` when none exists; an existing row is
    left untouched, so a manager is never downgraded to developer.
    """
    if user_id is None:
        return

    try:
        with db.begin_nested():
            existing = db.query(ProjectMember.id).filter(
                ProjectMember.project_id == project_id,
                ProjectMember.user_id == user_id,
            ).first()
            if not existing:
                db.add(ProjectMember(project_id=project_id, user_id=user_id, role=role))
        db.commit()
        if not existing:
            logger.info("User %d joined project %d as %s", user_id, project_id, role.value)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Failed to sync project member (project=%s, user=%s): %s", project_id, user_id, e)
