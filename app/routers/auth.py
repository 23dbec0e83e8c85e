from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.core import validators
from app.core.deps import get_login_limiter, get_signup_limiter, get_user_repo
from app.core.rate_limit import AttemptLimiter, attempt_key
from app.database.user_repo import UserRepo
from app.schemas.context import UserContext
from app.schemas.user import LoginRequest, PasswordChange, ProfileUpdate, SignupRequest
from app.services.auth_service import AuthService

router = APIRouter()

UserRepoDep = Annotated[UserRepo, Depends(get_user_repo)]
UserDep = Annotated[UserContext, Depends(AuthService.get_current_user)]


def _client(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup_endpoint(
    payload: SignupRequest,
    request: Request,
    repo: UserRepoDep,
    limiter: Annotated[AttemptLimiter, Depends(get_signup_limiter)],
):
    identity = validators.email(payload.email) or payload.email or payload.username
    limiter.hit(attempt_key(_client(request), identity))
    result = await AuthService.signup(payload, repo)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={
            "success": True,
            "message": "User registered successfully",
            **result.model_dump(),
        },
    )


@router.post("/login")
async def login_endpoint(
    payload: LoginRequest,
    request: Request,
    repo: UserRepoDep,
    limiter: Annotated[AttemptLimiter, Depends(get_login_limiter)],
):
    limiter.hit(attempt_key(_client(request), validators.email(payload.email) or payload.email))
    result = await AuthService.login(payload, repo)
    return {"success": True, "message": "Login successful", **result.model_dump()}


@router.get("/me")
async def me_endpoint(user: UserDep, repo: UserRepoDep):
    found = await AuthService.me(user, repo)
    return {"success": True, "user": found}


@router.put("/profile")
async def update_profile_endpoint(payload: ProfileUpdate, user: UserDep, repo: UserRepoDep):
    updated = await AuthService.update_profile(payload, user, repo)
    return {"success": True, "message": "Profile updated successfully", "user": updated}


@router.put("/password")
async def change_password_endpoint(payload: PasswordChange, user: UserDep, repo: UserRepoDep):
    await AuthService.change_password(payload, user, repo)
    return {"success": True, "message": "Password changed successfully"}


@router.post("/logout")
async def logout_endpoint():
    return {"success": True, "message": "Logout successful"}
