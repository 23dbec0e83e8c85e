from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

ATTENDANCE_STATUSES = ("present", "absent", "late", "excused")


class AttendanceMark(BaseModel):
    studentId: Optional[str] = None
    status: Optional[str] = None
    date: Optional[str] = None
    className: Optional[str] = None
    notes: Optional[str] = None
    semester: Optional[str] = None


class AttendanceRecord(BaseModel):
    id: str
    studentId: str
    className: str
    date: datetime
    status: Literal["present", "absent", "late", "excused"]
    markedBy: str
    notes: str = ""
    semester: str
    createdAt: datetime


class AttendanceRecordView(BaseModel):
    id: str
    date: str
    status: str
    className: str
    markedBy: str
    notes: str = ""
