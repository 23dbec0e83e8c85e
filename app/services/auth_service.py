# app/services/auth_service.py
import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core import validators
from app.core.errors import AuthError, ConflictError, ValidationError
from app.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from app.database.user_repo import UserRepo
from app.schemas.context import UserContext
from app.schemas.user import (
    AuthResult,
    LoginRequest,
    PasswordChange,
    ProfileUpdate,
    PublicUser,
    SignupRequest,
    User,
)
from app.services.common import new_id, utcnow

logger = logging.getLogger("portal.auth")

bearer_scheme = HTTPBearer(auto_error=False)


def _issue(user: User) -> AuthResult:
    token = create_access_token(user.id, user.username, user.role)
    return AuthResult(token=token, user=PublicUser.from_user(user))


class AuthService:

    @staticmethod
    async def get_current_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    ) -> UserContext:
        if credentials is None or not credentials.credentials:
            raise AuthError("No token provided")
        return decode_access_token(credentials.credentials)

    @staticmethod
    async def signup(data: SignupRequest, repo: UserRepo) -> AuthResult:
        username = validators.username(data.username)
        email = validators.email(data.email)
        password = validators.password(data.password)
        role = validators.role(data.role)
        if not (username and email and password and role):
            logger.info(
                "Signup validation failed: username=%s email=%s password=%s role=%s",
                *("valid" if v else "invalid" for v in (username, email, password, role)),
            )
            raise ValidationError()

        if await repo.find_by_identity(email, username):
            raise ConflictError("User with this email or username already exists")

        now = utcnow()
        user = User(
            id=new_id(),
            username=username,
            email=email,
            passwordHash=get_password_hash(password),
            role=role,
            createdAt=now,
            updatedAt=now,
        )
        await repo.create(user)
        logger.info("User created: id=%s role=%s", user.id, user.role)
        return _issue(user)

    @staticmethod
    async def login(data: LoginRequest, repo: UserRepo) -> AuthResult:
        email = validators.email(data.email)
        password = validators.password(data.password)
        if not email or not password:
            raise ValidationError("Invalid email or password format")

        user = await repo.find_by_email(email)
        if user is None or not verify_password(password, user.passwordHash):
            logger.info("Rejected login for %s", email)
            raise AuthError("Invalid email or password")

        logger.info("Login successful: id=%s role=%s", user.id, user.role)
        return _issue(user)

    @staticmethod
    async def me(user: UserContext, repo: UserRepo) -> PublicUser:
        found = await repo.find_one(user.user_id)
        if found is None:
            raise AuthError("User not found")
        return PublicUser.from_user(found)

    @staticmethod
    async def update_profile(data: ProfileUpdate, user: UserContext, repo: UserRepo) -> PublicUser:
        current = await repo.find_one(user.user_id)
        if current is None:
            raise AuthError("User not found")

        username = validators.username(data.username) if data.username else current.username
        email = validators.email(data.email) if data.email else current.email
        if not username or not email:
            raise ValidationError()

        if username != current.username or email != current.email:
            if await repo.find_by_identity(email, username, exclude_id=current.id):
                raise ConflictError("Username or email already taken")
            await repo.update(current.id, {"username": username, "email": email, "updatedAt": utcnow()})

        return PublicUser(id=current.id, username=username, email=email, role=current.role)

    @staticmethod
    async def change_password(data: PasswordChange, user: UserContext, repo: UserRepo) -> None:
        current_pw = validators.password(data.currentPassword)
        new_pw = validators.password(data.newPassword)
        if not current_pw or not new_pw:
            raise ValidationError("Invalid password format")

        current = await repo.find_one(user.user_id)
        if current is None:
            raise AuthError("User not found")
        if not verify_password(current_pw, current.passwordHash):
            raise AuthError("Current password is incorrect")

        await repo.update(current.id, {"passwordHash": get_password_hash(new_pw), "updatedAt": utcnow()})
        logger.info("Password changed: id=%s", current.id)
