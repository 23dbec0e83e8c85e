from typing import Dict

from pydantic import BaseModel


class AssignmentStats(BaseModel):
    completionRate: int = 0
    totalAssignments: int = 0
    completedAssignments: int = 0
    pendingAssignments: int = 0
    avgScore: int = 0


class StudentAssignmentStats(AssignmentStats):
    upcomingDeadlines: int = 0


class TeacherAssignmentStats(AssignmentStats):
    totalSubmissions: int = 0
    pendingGrading: int = 0


class AdminAssignmentStats(AssignmentStats):
    totalSubmissions: int = 0
    systemAvg: int = 0


class AttendanceStats(BaseModel):
    rate: int = 0
    studyHours: float = 0
    gpa: float = 0
    semester: str = ""


class StudentAttendanceStats(AttendanceStats):
    totalClasses: int = 0
    presentClasses: int = 0
    absentClasses: int = 0


class TeacherAttendanceStats(AttendanceStats):
    totalClasses: int = 0
    totalStudents: int = 0
    avgAttendance: int = 0


class AdminAttendanceStats(AttendanceStats):
    totalUsers: int = 0
    totalClasses: int = 0
    systemAttendance: int = 0


class ScheduleStats(BaseModel):
    totalClasses: int = 0
    distinctClasses: int = 0
    weeklyMinutes: int = 0
    perDay: Dict[str, int] = {}
