from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from orchestrate.database import get_db
from orchestrate.dependencies import get_current_principal
from orchestrate.permissions import Principal
from orchestrate.schemas.user import UserCreate, UserStatusUpdate
from orchestrate.services import user_service
from orchestrate.services.user_service import user_to_dict

router = APIRouter()


@router.get("/")
def list_users(viewer: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    """List all users (admin only)"""
    return [user_to_dict(u) for u in user_service.list_users(db, viewer)]


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_user(
    data: UserCreate,
    viewer: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Create a user (admin only)"""
    return user_to_dict(user_service.create_user(db, viewer, data))


@router.patch("/{user_id}/status")
def update_user_status(
    user_id: int,
    update: UserStatusUpdate,
    viewer: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Enable or disable a user (admin only)"""
    return user_to_dict(user_service.update_user_status(db, viewer, user_id, update.status))


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    viewer: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Delete a user (admin only)"""
    user_service.delete_user(db, viewer, user_id)
    return {"success": True, "message": "Deleted"}
