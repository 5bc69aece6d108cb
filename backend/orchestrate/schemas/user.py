from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional
from orchestrate.models.user import UserRole


class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
    role: UserRole = UserRole.DEVELOPER

    @field_validator("password")
    @classmethod
    def password_length(cls, v):
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password cannot be longer than 72 characters")
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str


class UserCreate(BaseModel):
    name: str
    email: EmailStr
    role: UserRole
    password: Optional[str] = None


class UserStatusUpdate(BaseModel):
    status: str
