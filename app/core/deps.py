from fastapi import Request

from app.core.rate_limit import AttemptLimiter
from app.database.assignment_repo import AssignmentRepo
from app.database.attendance_repo import AttendanceRepo
from app.database.file_store import FileStore
from app.database.note_repo import NoteRepo
from app.database.schedule_repo import ScheduleRepo
from app.database.user_repo import UserRepo


def _state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{name} not initialised")
    return value


def get_user_repo(request: Request) -> UserRepo:
    return _state(request, "user_repo")


def get_schedule_repo(request: Request) -> ScheduleRepo:
    return _state(request, "schedule_repo")


def get_assignment_repo(request: Request) -> AssignmentRepo:
    return _state(request, "assignment_repo")


def get_attendance_repo(request: Request) -> AttendanceRepo:
    return _state(request, "attendance_repo")


def get_note_repo(request: Request) -> NoteRepo:
    return _state(request, "note_repo")


def get_submission_files(request: Request) -> FileStore:
    return _state(request, "submission_files")


def get_note_files(request: Request) -> FileStore:
    return _state(request, "note_files")


def get_login_limiter(request: Request) -> AttemptLimiter:
    return _state(request, "login_limiter")


def get_signup_limiter(request: Request) -> AttemptLimiter:
    return _state(request, "signup_limiter")
