from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from datetime import timedelta
from orchestrate.config import Settings
from orchestrate.database import get_db
from orchestrate.dependencies import get_settings
from orchestrate.errors import Forbidden
from orchestrate.models.user import UserRole
from orchestrate.schemas.user import RegisterRequest, LoginRequest
from orchestrate.services.user_service import register_user, authenticate_user, user_to_dict
from orchestrate.utils.security import create_access_token

router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Register a new account"""
    if data.role == UserRole.ADMIN:
        raise Forbidden("Admin accounts are created by an administrator")

    user = register_user(db, data)
    return user_to_dict(user)


@router.post("/login")
def login(credentials: LoginRequest, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    """Login - Get access token"""
    user = authenticate_user(
        db,
        credentials.email,
        credentials.password,
        allowed_roles=settings.login_allowed_roles,
    )

    access_token = create_access_token(
        data={"sub": str(user.id), "role": user.role.value},
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": user_to_dict(user)
    }
