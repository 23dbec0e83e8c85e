import logging
from datetime import datetime
from typing import List, Optional

from app.core import validators
from app.core.config import settings
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.policy import authorize
from app.database.attendance_repo import AttendanceRepo
from app.database.user_repo import UserRepo
from app.schemas.attendance import (
    ATTENDANCE_STATUSES,
    AttendanceMark,
    AttendanceRecord,
    AttendanceRecordView,
)
from app.schemas.context import UserContext
from app.schemas.stats import AttendanceStats
from app.services.common import new_id, require_id, utcnow
from app.services.stats_service import compute_attendance_stats

logger = logging.getLogger("portal.attendance")


def _class_day(value: datetime) -> datetime:
    """Attendance is per calendar day: keep the date, drop the time."""
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


class AttendanceService:

    @staticmethod
    async def mark(
        data: AttendanceMark,
        user: UserContext,
        repo: AttendanceRepo,
        users: UserRepo,
    ) -> AttendanceRecord:
        authorize(user, "attendance", "mark", message="Only teachers and admins can mark attendance")

        if not (data.studentId and data.status and data.date and data.className):
            raise ValidationError("All required fields must be provided")
        status = validators.enum_value(data.status, ATTENDANCE_STATUSES)
        if status is None:
            raise ValidationError("Invalid status. Must be one of: " + ", ".join(ATTENDANCE_STATUSES))
        student_id = require_id(data.studentId, "Invalid student id")
        day = validators.parse_date(data.date)
        if day is None:
            raise ValidationError("Invalid date")
        class_name = validators.bounded_string(data.className, 100)
        if class_name is None:
            raise ValidationError("All required fields must be provided")

        student = await users.find_one(student_id)
        if student is None or student.role != "student":
            raise NotFoundError("Student not found")

        record = AttendanceRecord(
            id=new_id(),
            studentId=student_id,
            className=class_name,
            date=_class_day(day),
            status=status,
            markedBy=user.user_id,
            notes=validators.bounded_string(data.notes, 500, required=False) or "",
            semester=validators.bounded_string(data.semester, 50) or settings.current_semester,
            createdAt=utcnow(),
        )
        # the unique (student, class, date) index rejects duplicates with ConflictError
        try:
            await repo.create(record)
        except ConflictError:
            logger.info("Duplicate attendance for %s in %s on %s",
                        student_id, class_name, record.date.date().isoformat())
            raise
        logger.info("Attendance %s marked for %s in %s by %s",
                    status, student_id, class_name, user.user_id)
        return record

    @staticmethod
    async def records(
        user: UserContext,
        repo: AttendanceRepo,
        users: UserRepo,
        student_id: Optional[str] = None,
    ) -> List[AttendanceRecordView]:
        authorize(user, "attendance", "read")
        if user.role == "student":
            target = user.user_id
        else:
            if not student_id:
                raise ValidationError("Student ID is required for teachers and admins")
            target = require_id(student_id, "Invalid student id")

        found = await repo.find(student_id=target)
        names = await users.usernames(r.markedBy for r in found)
        return [
            AttendanceRecordView(
                id=r.id,
                date=r.date.date().isoformat(),
                status=r.status,
                className=r.className,
                markedBy=names.get(r.markedBy, r.markedBy),
                notes=r.notes,
            )
            for r in found
        ]

    @staticmethod
    async def stats(
        user: UserContext,
        repo: AttendanceRepo,
        semester: Optional[str] = None,
    ) -> AttendanceStats:
        authorize(user, "attendance", "stats")
        semester = validators.bounded_string(semester, 50) or settings.current_semester
        if user.role == "student":
            found = await repo.find(student_id=user.user_id, semester=semester)
        elif user.role == "teacher":
            found = await repo.find(marked_by=user.user_id, semester=semester)
        else:
            found = await repo.find(semester=semester)
        return compute_attendance_stats(
            user.role, user.user_id, found, semester, settings.attendance_bands
        )
