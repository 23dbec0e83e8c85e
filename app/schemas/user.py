from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class SignupRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdate(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None


class PasswordChange(BaseModel):
    currentPassword: Optional[str] = None
    newPassword: Optional[str] = None


class User(BaseModel):
    id: str
    username: str
    email: str
    passwordHash: str
    role: str
    createdAt: datetime
    updatedAt: datetime


class PublicUser(BaseModel):
    id: str
    username: str
    email: str
    role: str

    @classmethod
    def from_user(cls, user: User) -> "PublicUser":
        return cls(id=user.id, username=user.username, email=user.email, role=user.role)


class AuthResult(BaseModel):
    token: str
    user: PublicUser
