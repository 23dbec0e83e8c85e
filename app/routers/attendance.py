from typing import Annotated, Optional

from fastapi import APIRouter, Depends, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.core.deps import get_attendance_repo, get_user_repo
from app.database.attendance_repo import AttendanceRepo
from app.database.user_repo import UserRepo
from app.schemas.attendance import AttendanceMark
from app.schemas.context import UserContext
from app.services.attendance_service import AttendanceService
from app.services.auth_service import AuthService

router = APIRouter()

RepoDep = Annotated[AttendanceRepo, Depends(get_attendance_repo)]
UsersDep = Annotated[UserRepo, Depends(get_user_repo)]
UserDep = Annotated[UserContext, Depends(AuthService.get_current_user)]


@router.get("/attendance/stats")
async def attendance_stats_endpoint(user: UserDep, repo: RepoDep, semester: Optional[str] = None):
    stats = await AttendanceService.stats(user, repo, semester)
    return {"success": True, **stats.model_dump()}


@router.get("/attendance/records")
async def attendance_records_endpoint(
    user: UserDep,
    repo: RepoDep,
    users: UsersDep,
    studentId: Optional[str] = None,
):
    records = await AttendanceService.records(user, repo, users, studentId)
    return {"success": True, "records": records}


@router.post("/attendance/mark", status_code=status.HTTP_201_CREATED)
async def mark_attendance_endpoint(payload: AttendanceMark, user: UserDep, repo: RepoDep, users: UsersDep):
    record = await AttendanceService.mark(payload, user, repo, users)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({
            "success": True,
            "message": "Attendance marked successfully",
            "attendance": {
                "id": record.id,
                "studentId": record.studentId,
                "className": record.className,
                "date": record.date.date().isoformat(),
                "status": record.status,
                "markedBy": user.username or user.user_id,
                "notes": record.notes,
                "semester": record.semester,
            },
        }),
    )
