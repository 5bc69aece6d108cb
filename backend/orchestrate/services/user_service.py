"""Accounts: registration, login checks and ADMIN user administration."""

import logging
from typing import List, Sequence

from sqlalchemy.orm import Session

from orchestrate.errors import ConflictError, Forbidden, NotFound, Unauthorized, ValidationError
from orchestrate.models.user import User, UserRole, UserStatus
from orchestrate.permissions import Action, Principal, require
from orchestrate.schemas.user import RegisterRequest, UserCreate
from orchestrate.utils.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_PASSWORD = "changeme123"


def user_to_dict(user: User) -> dict:
    """Public view of a user; never includes the password hash."""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
        "status": user.status.value,
        "created_at": user.created_at.isoformat() if user.created_at else None,
        "updated_at": user.updated_at.isoformat() if user.updated_at else None,
    }


def _ensure_email_free(db: Session, email: str) -> None:
    if db.query(User.id).filter(User.email == email).first():
        raise ConflictError("User already exists")


def register_user(db: Session, data: RegisterRequest) -> User:
    _ensure_email_free(db, data.email)

    user = User(
        name=data.name,
        email=data.email,
        hashed_password=get_password_hash(data.password),
        role=data.role,
        status=UserStatus.ACTIVE,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User #%d registered as %s", user.id, user.role.value)
    return user


def authenticate_user(db: Session, email: str, password: str, allowed_roles: Sequence[str] = ()) -> User:
    """Return the user for valid credentials or raise.

    ``allowed_roles`` restricts which roles may log in; empty allows all.
    """
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise Unauthorized("Invalid credentials")
    if user.status != UserStatus.ACTIVE:
        raise Forbidden("User is disabled")
    if not verify_password(password, user.hashed_password):
        raise Unauthorized("Invalid credentials")
    if allowed_roles and user.role.value not in allowed_roles:
        raise Forbidden("Access restricted. Please contact your administrator.")
    return user


def list_users(db: Session, viewer: Principal) -> List[User]:
    require(viewer, Action.MANAGE_USERS)
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def create_user(db: Session, viewer: Principal, data: UserCreate) -> User:
    require(viewer, Action.MANAGE_USERS)
    _ensure_email_free(db, data.email)

    user = User(
        name=data.name,
        email=data.email,
        role=data.role,
        hashed_password=get_password_hash(data.password or DEFAULT_ADMIN_PASSWORD),
        status=UserStatus.ACTIVE,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User #%d created by admin %d", user.id, viewer.id)
    return user


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user


def update_user_status(db: Session, viewer: Principal, user_id: int, status: str) -> User:
    require(viewer, Action.MANAGE_USERS)
    try:
        new_status = UserStatus(status)
    except ValueError:
        raise ValidationError("Invalid status")

    user = _get_user(db, user_id)
    user.status = new_status
    db.commit()
    db.refresh(user)
    logger.info("User #%d set to %s by admin %d", user.id, new_status.value, viewer.id)
    return user


def delete_user(db: Session, viewer: Principal, user_id: int) -> None:
    require(viewer, Action.MANAGE_USERS)
    user = _get_user(db, user_id)

    db.delete(user)
    db.commit()
    logger.info("User #%d deleted by admin %d", user_id, viewer.id)
