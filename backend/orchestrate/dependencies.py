from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from orchestrate.config import Settings
from orchestrate.database import get_db
from orchestrate.errors import Forbidden, Unauthorized
from orchestrate.models.user import User, UserStatus
from orchestrate.permissions import Principal
from orchestrate.utils.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _principal_from_token(db: Session, settings: Settings, token: str) -> Principal:
    payload = decode_access_token(token, settings.SECRET_KEY, settings.ALGORITHM)
    if not payload or not str(payload.get("sub", "")).isdigit():
        raise Forbidden("Invalid token")

    # The user must still exist and be active
    user = db.query(User).filter(User.id == int(payload["sub"])).first()
    if not user:
        raise Forbidden("User not found")
    if user.status != UserStatus.ACTIVE:
        raise Forbidden("User disabled")

    return Principal(id=user.id, role=user.role)


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Principal:
    if credentials is None:
        raise Unauthorized("Access token required")
    return _principal_from_token(db, settings, credentials.credentials)


def get_optional_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Optional[Principal]:
    """Principal when a token is sent, None for anonymous callers."""
    if credentials is None:
        return None
    return _principal_from_token(db, settings, credentials.credentials)
