# test/pytest/test_attendance.py
import pytest

from app.core.config import settings
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.schemas.attendance import AttendanceMark
from app.schemas.context import UserContext
from app.services.attendance_service import AttendanceService
from conftest import oid


@pytest.fixture
def enrolled(users):
    return users.add("student", "alice")


@pytest.fixture
def marker(users):
    found = users.add("teacher", "prof_x")
    return UserContext(user_id=found.id, role="teacher", username=found.username)


def _mark(student_id, **overrides):
    base = dict(studentId=student_id, status="present", date="2024-03-04T10:15:00Z", className="CS101")
    base.update(overrides)
    return AttendanceMark(**base)


@pytest.mark.asyncio
async def test_mark_ok(attendance, users, marker, enrolled):
    record = await AttendanceService.mark(_mark(enrolled.id, status="Late"), marker, attendance, users)
    assert record.status == "late"
    assert record.markedBy == marker.user_id
    assert record.semester == settings.current_semester
    assert (record.date.hour, record.date.minute) == (0, 0)


@pytest.mark.asyncio
async def test_duplicate_mark_conflicts(attendance, users, marker, enrolled):
    await AttendanceService.mark(_mark(enrolled.id), marker, attendance, users)
    # same calendar day, different time
    with pytest.raises(ConflictError):
        await AttendanceService.mark(_mark(enrolled.id, date="2024-03-04T16:00:00Z", status="absent"),
                                     marker, attendance, users)
    await AttendanceService.mark(_mark(enrolled.id, className="MATH"), marker, attendance, users)
    assert len(attendance.items) == 2


@pytest.mark.asyncio
async def test_mark_validation(attendance, users, marker, enrolled):
    with pytest.raises(ValidationError) as exc:
        await AttendanceService.mark(_mark(enrolled.id, status="sleeping"), marker, attendance, users)
    assert exc.value.message == "Invalid status. Must be one of: present, absent, late, excused"
    with pytest.raises(ValidationError):
        await AttendanceService.mark(_mark(enrolled.id, className=None), marker, attendance, users)
    with pytest.raises(ValidationError):
        await AttendanceService.mark(_mark(enrolled.id, date="someday"), marker, attendance, users)
    with pytest.raises(ValidationError):
        await AttendanceService.mark(_mark("42"), marker, attendance, users)
    assert attendance.items == []


@pytest.mark.asyncio
async def test_mark_unknown_or_non_student(attendance, users, marker):
    with pytest.raises(NotFoundError):
        await AttendanceService.mark(_mark(oid()), marker, attendance, users)
    with pytest.raises(NotFoundError):
        await AttendanceService.mark(_mark(marker.user_id), marker, attendance, users)


@pytest.mark.asyncio
async def test_student_cannot_mark(attendance, users, enrolled):
    me = UserContext(user_id=enrolled.id, role="student")
    with pytest.raises(PermissionError):
        await AttendanceService.mark(_mark(enrolled.id), me, attendance, users)


@pytest.mark.asyncio
async def test_records_scoping(attendance, users, marker, enrolled):
    other = users.add("student", "bob")
    await AttendanceService.mark(_mark(enrolled.id, date="2024-03-04"), marker, attendance, users)
    await AttendanceService.mark(_mark(enrolled.id, date="2024-03-06"), marker, attendance, users)
    await AttendanceService.mark(_mark(other.id), marker, attendance, users)

    me = UserContext(user_id=enrolled.id, role="student")
    # studentId is ignored for students
    own = await AttendanceService.records(me, attendance, users, student_id=other.id)
    assert [r.date for r in own] == ["2024-03-06", "2024-03-04"]
    assert own[0].markedBy == "prof_x"

    theirs = await AttendanceService.records(marker, attendance, users, student_id=other.id)
    assert len(theirs) == 1

    with pytest.raises(ValidationError):
        await AttendanceService.records(marker, attendance, users)


@pytest.mark.asyncio
async def test_stats_by_role(attendance, users, marker, enrolled, admin):
    await AttendanceService.mark(_mark(enrolled.id, date="2024-03-04"), marker, attendance, users)
    await AttendanceService.mark(_mark(enrolled.id, date="2024-03-05", status="absent"), marker, attendance, users)
    await AttendanceService.mark(_mark(enrolled.id, date="2024-03-06", semester="Fall 2023"),
                                 marker, attendance, users)

    me = UserContext(user_id=enrolled.id, role="student")
    mine = await AttendanceService.stats(me, attendance)
    assert mine.totalClasses == 2
    assert mine.rate == 50

    fall = await AttendanceService.stats(me, attendance, semester="Fall 2023")
    assert fall.totalClasses == 1
    assert fall.rate == 100
    assert fall.gpa == 4.0

    teacher_view = await AttendanceService.stats(marker, attendance)
    assert teacher_view.totalStudents == 1

    system = await AttendanceService.stats(admin, attendance)
    assert system.totalUsers == 1
    assert system.systemAttendance == 50
