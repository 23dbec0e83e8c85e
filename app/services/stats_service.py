# app/services/stats_service.py
"""
Summary statistics for the dashboards.

Everything here is a pure function of the records handed in: callers fetch
the records, these functions scope them to the caller's role, count, and
return a role-shaped model. Nothing is cached; every request recomputes.
"""
import math
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from app.core.config import AttendanceBands
from app.core.validators import DAYS_OF_WEEK, time_to_minutes
from app.schemas.assignment import Assignment
from app.schemas.attendance import AttendanceRecord
from app.schemas.schedule import ScheduleEntry
from app.schemas.stats import (
    AdminAssignmentStats,
    AdminAttendanceStats,
    AssignmentStats,
    AttendanceStats,
    ScheduleStats,
    StudentAssignmentStats,
    StudentAttendanceStats,
    TeacherAssignmentStats,
    TeacherAttendanceStats,
)

UPCOMING_WINDOW = timedelta(days=7)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percent(part: int, whole: int) -> int:
    """Integer percentage, rounded half up; 0 when `whole` is 0."""
    if whole <= 0:
        return 0
    return round_half_up(part * 100 / whole)


def mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


# --------------------------------------------------------------------------
# Assignments
# --------------------------------------------------------------------------

def visible_to_student(assignment: Assignment, student_id: str, open_when_unassigned: bool) -> bool:
    if not assignment.assignedTo:
        return open_when_unassigned
    return student_id in assignment.assignedTo


def scope_assignments(role: str, caller_id: str, assignments: Iterable[Assignment],
                      open_when_unassigned: bool = True) -> List[Assignment]:
    published = [a for a in assignments if a.status == "published"]
    if role == "student":
        return [a for a in published if visible_to_student(a, caller_id, open_when_unassigned)]
    if role == "teacher":
        return [a for a in published if a.createdBy == caller_id]
    return published


def compute_assignment_stats(
    role: str,
    caller_id: str,
    assignments: Iterable[Assignment],
    now: Optional[datetime] = None,
    open_when_unassigned: bool = True,
) -> AssignmentStats:
    now = _aware(now or datetime.now(timezone.utc))
    scoped = scope_assignments(role, caller_id, assignments, open_when_unassigned)
    total = len(scoped)

    if role == "student":
        mine = [(a, a.submission_for(caller_id)) for a in scoped]
        completed = sum(1 for _, sub in mine if sub is not None)
        scores = [sub.score for _, sub in mine if sub is not None and sub.is_graded]
        upcoming = sum(
            1 for a, sub in mine
            if sub is None and now < _aware(a.dueDate) <= now + UPCOMING_WINDOW
        )
        return StudentAssignmentStats(
            completionRate=percent(completed, total),
            totalAssignments=total,
            completedAssignments=completed,
            pendingAssignments=total - completed,
            avgScore=round_half_up(mean(scores)),
            upcomingDeadlines=upcoming,
        )

    submissions = [sub for a in scoped for sub in a.submissions]
    scores = [sub.score for sub in submissions if sub.is_graded]
    graded = len(scores)
    pending = len(submissions) - graded
    avg = round_half_up(mean(scores))
    common = dict(
        completionRate=percent(graded, len(submissions)),
        totalAssignments=total,
        completedAssignments=graded,
        pendingAssignments=pending,
        avgScore=avg,
        totalSubmissions=len(submissions),
    )
    if role == "teacher":
        return TeacherAssignmentStats(pendingGrading=pending, **common)
    return AdminAssignmentStats(systemAvg=avg, **common)


# --------------------------------------------------------------------------
# Attendance
# --------------------------------------------------------------------------

def scope_attendance(role: str, caller_id: str, records: Iterable[AttendanceRecord],
                     semester: Optional[str] = None) -> List[AttendanceRecord]:
    scoped = [r for r in records if semester is None or r.semester == semester]
    if role == "student":
        return [r for r in scoped if r.studentId == caller_id]
    if role == "teacher":
        return [r for r in scoped if r.markedBy == caller_id]
    return scoped


def compute_attendance_stats(
    role: str,
    caller_id: str,
    records: Iterable[AttendanceRecord],
    semester: str,
    bands: Dict[str, AttendanceBands],
) -> AttendanceStats:
    scoped = scope_attendance(role, caller_id, records, semester)
    total = len(scoped)
    present = sum(1 for r in scoped if r.status == "present")
    rate = percent(present, total)

    band = bands.get(role) or bands["admin"]
    base = dict(
        rate=rate,
        studyHours=band.study_hours(rate),
        gpa=round(band.gpa(rate), 1),
        semester=semester,
    )

    if role == "student":
        return StudentAttendanceStats(
            totalClasses=total,
            presentClasses=present,
            absentClasses=total - present,
            **base,
        )
    if role == "teacher":
        return TeacherAttendanceStats(
            totalClasses=total,
            totalStudents=len({r.studentId for r in scoped}),
            avgAttendance=rate,
            **base,
        )
    return AdminAttendanceStats(
        totalUsers=len({r.studentId for r in scoped}),
        totalClasses=len({r.className for r in scoped}),
        systemAttendance=rate,
        **base,
    )


# --------------------------------------------------------------------------
# Schedule
# --------------------------------------------------------------------------

def compute_schedule_stats(role: str, caller_id: str, entries: Iterable[ScheduleEntry]) -> ScheduleStats:
    entries = list(entries)
    if role == "teacher":
        entries = [e for e in entries if e.userId == caller_id]

    per_day = {day: 0 for day in DAYS_OF_WEEK}
    minutes = 0
    for e in entries:
        per_day[e.dayOfWeek] = per_day.get(e.dayOfWeek, 0) + 1
        start, end = time_to_minutes(e.startTime), time_to_minutes(e.endTime)
        if start is not None and end is not None and end > start:
            minutes += end - start

    return ScheduleStats(
        totalClasses=len(entries),
        distinctClasses=len({e.className for e in entries}),
        weeklyMinutes=minutes,
        perDay=per_day,
    )
