from pydantic import BaseModel, Field
from typing import Any, List, Literal, Optional
from datetime import datetime

AssignmentStatus = Literal["draft", "published", "closed"]
ASSIGNMENT_STATUSES = ("draft", "published", "closed")


class AssignmentCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    dueDate: Optional[str] = None
    className: Optional[str] = None
    assignedTo: Optional[List[str]] = None
    status: Optional[str] = None


class AssignmentUpdate(AssignmentCreate):
    pass


class SubmissionCreate(BaseModel):
    submissionText: Optional[str] = None
    fileData: Optional[str] = None
    fileName: Optional[str] = None
    fileType: Optional[str] = None


class GradeRequest(BaseModel):
    score: Any = None
    feedback: Optional[str] = None


class Submission(BaseModel):
    studentId: str
    studentName: str = ""
    submittedAt: datetime
    content: str = ""
    fileId: Optional[str] = None
    fileName: Optional[str] = None
    fileType: Optional[str] = None
    fileSize: Optional[int] = None
    score: Optional[int] = None
    feedback: Optional[str] = None
    gradedAt: Optional[datetime] = None
    gradedBy: Optional[str] = None

    @property
    def is_graded(self) -> bool:
        return self.score is not None


class Assignment(BaseModel):
    id: str
    title: str
    description: str
    dueDate: datetime
    className: str
    createdBy: str
    createdByName: str = ""
    assignedTo: List[str] = Field(default_factory=list)
    status: AssignmentStatus = "published"
    maxScore: int = 100
    submissions: List[Submission] = Field(default_factory=list)
    createdAt: datetime
    updatedAt: datetime

    def submission_for(self, student_id: str) -> Optional[Submission]:
        for sub in self.submissions:
            if sub.studentId == student_id:
                return sub
        return None


class StudentAssignmentView(BaseModel):
    id: str
    title: str
    description: str
    dueDate: str
    className: str
    status: Literal["completed", "pending"]
    score: Optional[int] = None
    feedback: Optional[str] = None
    submittedAt: Optional[datetime] = None
    fileName: Optional[str] = None


class TeacherAssignmentView(BaseModel):
    id: str
    title: str
    description: str
    dueDate: str
    className: str
    status: AssignmentStatus
    assignedTo: List[str]
    totalSubmissions: int
    gradedSubmissions: int
    pendingGrading: int
    submissions: List[Submission]


class AdminAssignmentView(TeacherAssignmentView):
    teacher: str
