import base64
import binascii
import logging
from typing import List, Optional, Sequence, Union

from app.core import validators
from app.core.config import settings
from app.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.core.policy import FULL, authorize
from app.database.assignment_repo import AssignmentRepo
from app.database.file_store import FileStore, StoredFile
from app.schemas.assignment import (
    ASSIGNMENT_STATUSES,
    AdminAssignmentView,
    Assignment,
    AssignmentCreate,
    AssignmentUpdate,
    GradeRequest,
    StudentAssignmentView,
    Submission,
    SubmissionCreate,
    TeacherAssignmentView,
)
from app.schemas.context import UserContext
from app.schemas.stats import AssignmentStats
from app.services.common import check_upload, new_id, require_id, utcnow
from app.services.stats_service import compute_assignment_stats, visible_to_student

logger = logging.getLogger("portal.assignments")

AssignmentView = Union[StudentAssignmentView, TeacherAssignmentView, AdminAssignmentView]


def _open_flag(value: Optional[bool]) -> bool:
    return settings.unassigned_assignment_open if value is None else value


def _day(assignment: Assignment) -> str:
    return assignment.dueDate.date().isoformat()


def _student_view(a: Assignment, student_id: str) -> StudentAssignmentView:
    sub = a.submission_for(student_id)
    return StudentAssignmentView(
        id=a.id, title=a.title, description=a.description, dueDate=_day(a),
        className=a.className,
        status="completed" if sub else "pending",
        score=sub.score if sub else None,
        feedback=sub.feedback if sub else None,
        submittedAt=sub.submittedAt if sub else None,
        fileName=sub.fileName if sub else None,
    )


def _teacher_fields(a: Assignment) -> dict:
    graded = sum(1 for s in a.submissions if s.is_graded)
    return dict(
        id=a.id, title=a.title, description=a.description, dueDate=_day(a),
        className=a.className, status=a.status, assignedTo=a.assignedTo,
        totalSubmissions=len(a.submissions),
        gradedSubmissions=graded,
        pendingGrading=len(a.submissions) - graded,
        submissions=a.submissions,
    )


def _decode_file(data: SubmissionCreate) -> Optional[bytes]:
    if not data.fileData:
        return None
    payload = data.fileData
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("File data is not valid base64")


def _assigned_ids(raw: Optional[List[str]]) -> List[str]:
    out: List[str] = []
    for value in raw or []:
        checked = validators.identifier(value)
        if checked is None:
            raise ValidationError("assignedTo must contain valid student ids")
        if checked not in out:
            out.append(checked)
    return out


class AssignmentService:

    @staticmethod
    async def create_assignment(
        data: AssignmentCreate,
        user: UserContext,
        repo: AssignmentRepo
    ) -> Assignment:
        authorize(user, "assignment", "create", message="Only teachers and admins can create assignments")

        title = validators.bounded_string(data.title, 200)
        description = validators.bounded_string(data.description, 5000)
        class_name = validators.bounded_string(data.className, 100)
        if not (title and description and data.dueDate and class_name):
            raise ValidationError("All required fields must be provided")
        due = validators.parse_date(data.dueDate)
        if due is None:
            raise ValidationError("Invalid due date")
        status = "published"
        if data.status is not None:
            status = validators.enum_value(data.status, ASSIGNMENT_STATUSES)
            if status is None:
                raise ValidationError("Status must be one of: " + ", ".join(ASSIGNMENT_STATUSES))

        now = utcnow()
        assignment = Assignment(
            id=new_id(),
            title=title,
            description=description,
            dueDate=due,
            className=class_name,
            createdBy=user.user_id,
            createdByName=user.username,
            assignedTo=_assigned_ids(data.assignedTo),
            status=status,
            createdAt=now,
            updatedAt=now,
        )
        await repo.create(assignment)
        logger.info("Assignment %s created by %s", assignment.id, user.user_id)
        return assignment

    @staticmethod
    async def list_assignments(
        user: UserContext,
        repo: AssignmentRepo,
        open_when_unassigned: Optional[bool] = None,
    ) -> List[AssignmentView]:
        decision = authorize(user, "assignment", "list")
        open_flag = _open_flag(open_when_unassigned)

        if decision is FULL:
            items = await repo.find_all()
            return [AdminAssignmentView(teacher=a.createdByName or a.createdBy, **_teacher_fields(a))
                    for a in sorted(items, key=lambda a: a.createdAt, reverse=True)]

        if user.role == "student":
            items = await repo.find_for_student(user.user_id, open_flag)
            visible = [a for a in items
                       if a.status == "published" and visible_to_student(a, user.user_id, open_flag)]
            return [_student_view(a, user.user_id) for a in sorted(visible, key=lambda a: a.dueDate)]

        items = await repo.find_for_teacher(user.user_id)
        return [TeacherAssignmentView(**_teacher_fields(a))
                for a in sorted(items, key=lambda a: a.createdAt, reverse=True)]

    @staticmethod
    async def get_assignment(
        assignment_id: str,
        user: UserContext,
        repo: AssignmentRepo,
        open_when_unassigned: Optional[bool] = None,
    ) -> Optional[Assignment]:
        doc = await repo.find_one(assignment_id)
        if not doc:
            return None
        if user.role == "student":
            authorize(user, "assignment", "read")
            if doc.status != "published" or not visible_to_student(
                doc, user.user_id, _open_flag(open_when_unassigned)
            ):
                raise AuthorizationError("You are not assigned to this assignment")
            own = doc.submission_for(user.user_id)
            return doc.model_copy(update={"submissions": [own] if own else []})
        authorize(user, "assignment", "read", owner_id=doc.createdBy,
                  message="Access to this assignment is denied")
        return doc

    @staticmethod
    async def update_assignment(
        assignment_id: str,
        data: AssignmentUpdate,
        user: UserContext,
        repo: AssignmentRepo,
    ) -> Assignment:
        authorize(user, "assignment", "update", message="Only teachers and admins can update assignments")
        doc = await repo.find_one(assignment_id)
        if doc is None:
            raise NotFoundError("Assignment not found")
        authorize(user, "assignment", "update", owner_id=doc.createdBy,
                  message="You can only update your own assignments")

        fields: dict = {}
        for name, limit in (("title", 200), ("description", 5000), ("className", 100)):
            raw = getattr(data, name)
            if raw is not None:
                value = validators.bounded_string(raw, limit)
                if value is None:
                    raise ValidationError(f"{name} cannot be empty")
                fields[name] = value
        if data.dueDate is not None:
            due = validators.parse_date(data.dueDate)
            if due is None:
                raise ValidationError("Invalid due date")
            fields["dueDate"] = due
        if data.status is not None:
            status = validators.enum_value(data.status, ASSIGNMENT_STATUSES)
            if status is None:
                raise ValidationError("Status must be one of: " + ", ".join(ASSIGNMENT_STATUSES))
            fields["status"] = status
        if data.assignedTo is not None:
            fields["assignedTo"] = _assigned_ids(data.assignedTo)

        fields["updatedAt"] = utcnow()
        await repo.update(doc.id, fields)
        logger.info("Assignment %s updated by %s", doc.id, user.user_id)
        return doc.model_copy(update=fields)

    @staticmethod
    async def delete_assignment(
        assignment_id: str,
        user: UserContext,
        repo: AssignmentRepo,
        files: Optional[FileStore] = None,
    ) -> bool:
        authorize(user, "assignment", "delete", message="Only teachers and admins can delete assignments")
        doc = await repo.find_one(assignment_id)
        if doc is None:
            return False
        authorize(user, "assignment", "delete", owner_id=doc.createdBy,
                  message="You can only delete your own assignments")
        deleted = await repo.delete(doc.id)
        if deleted and files is not None:
            for sub in doc.submissions:
                if sub.fileId:
                    await files.delete(sub.fileId)
        if deleted:
            logger.info("Assignment %s deleted by %s", doc.id, user.user_id)
        return deleted

    @staticmethod
    async def submit(
        assignment_id: str,
        data: SubmissionCreate,
        user: UserContext,
        repo: AssignmentRepo,
        files: FileStore,
        open_when_unassigned: Optional[bool] = None,
        resubmission_policy: Optional[str] = None,
    ) -> Submission:
        authorize(user, "assignment", "submit", message="Only students can submit assignments")
        policy = resubmission_policy or settings.resubmission_policy

        doc = await repo.find_one(assignment_id)
        if doc is None:
            raise NotFoundError("Assignment not found")
        if doc.status != "published":
            raise ValidationError("Assignment is not available for submission")
        if not visible_to_student(doc, user.user_id, _open_flag(open_when_unassigned)):
            raise AuthorizationError("You are not assigned to this assignment")

        content = validators.bounded_string(data.submissionText, 10000, required=False) or ""
        payload = _decode_file(data)
        if not content and payload is None:
            raise ValidationError("Submission must include text or a file")

        existing = doc.submission_for(user.user_id)
        if existing is not None:
            if policy != "replace":
                raise ConflictError("Assignment already submitted")
            if existing.is_graded:
                raise ConflictError("Submission has already been graded")

        file_name = None
        file_type = None
        if payload is not None:
            file_type = validators.bounded_string(data.fileType, 200) or ""
            check_upload(payload, file_type, settings.submission_mime_types, settings.max_upload_bytes)
            file_name = validators.bounded_string(data.fileName, 255) or "submission"

        submission = Submission(
            studentId=user.user_id,
            studentName=user.username,
            submittedAt=utcnow(),
            content=content,
            fileName=file_name,
            fileType=file_type,
            fileSize=len(payload) if payload is not None else None,
        )
        if payload is not None:
            submission.fileId = await files.put(
                payload, file_name, file_type,
                metadata={"assignmentId": doc.id, "studentId": user.user_id},
            )

        if existing is None:
            stored = await repo.add_submission(doc.id, submission)
            failure = "Assignment already submitted"
        else:
            stored = await repo.replace_submission(doc.id, submission)
            failure = "Submission has already been graded"
        if not stored:
            if submission.fileId:
                await files.delete(submission.fileId)
            raise ConflictError(failure)

        if existing is not None and existing.fileId:
            await files.delete(existing.fileId)
        logger.info("Submission for %s stored for student %s", doc.id, user.user_id)
        return submission

    @staticmethod
    async def grade(
        assignment_id: str,
        student_id: str,
        data: GradeRequest,
        user: UserContext,
        repo: AssignmentRepo,
    ) -> Submission:
        authorize(user, "assignment", "grade", message="Only teachers and admins can grade submissions")
        student_id = require_id(student_id, "Invalid student id")

        doc = await repo.find_one(assignment_id)
        if doc is None:
            raise NotFoundError("Assignment not found")
        authorize(user, "assignment", "grade", owner_id=doc.createdBy,
                  message="You can only grade your own assignments")

        score = validators.bounded_int(data.score, 0, doc.maxScore)
        if score is None:
            raise ValidationError(f"Score must be a whole number between 0 and {doc.maxScore}")
        feedback = validators.bounded_string(data.feedback, 5000, required=False) or ""

        submission = doc.submission_for(student_id)
        if submission is None:
            raise NotFoundError("Submission not found")

        graded_at = utcnow()
        await repo.set_grade(doc.id, student_id, score, feedback, graded_at, user.user_id)
        logger.info("Submission of %s on %s graded %s by %s", student_id, doc.id, score, user.user_id)
        return submission.model_copy(update={
            "score": score, "feedback": feedback, "gradedAt": graded_at, "gradedBy": user.user_id,
        })

    @staticmethod
    async def download(
        assignment_id: str,
        student_id: str,
        user: UserContext,
        repo: AssignmentRepo,
        files: FileStore,
    ) -> StoredFile:
        authorize(user, "assignment", "download")
        student_id = require_id(student_id, "Invalid student id")

        doc = await repo.find_one(assignment_id)
        if doc is None:
            raise NotFoundError("Assignment not found")
        if user.role == "student":
            if student_id != user.user_id:
                raise AuthorizationError("You can only download your own submission")
        else:
            authorize(user, "assignment", "download", owner_id=doc.createdBy,
                      message="You can only download submissions to your own assignments")

        submission = doc.submission_for(student_id)
        if submission is None or not submission.fileId:
            raise NotFoundError("File not found")
        stored = await files.get(submission.fileId)
        if stored is None:
            raise NotFoundError("File not found")
        if submission.fileName:
            stored.filename = submission.fileName
        if submission.fileType:
            stored.content_type = submission.fileType
        return stored

    @staticmethod
    async def stats(
        user: UserContext,
        repo: AssignmentRepo,
        open_when_unassigned: Optional[bool] = None,
    ) -> AssignmentStats:
        decision = authorize(user, "assignment", "stats")
        open_flag = _open_flag(open_when_unassigned)
        records: Sequence[Assignment]
        if decision is FULL:
            records = await repo.find_all()
        elif user.role == "student":
            records = await repo.find_for_student(user.user_id, open_flag)
        else:
            records = await repo.find_for_teacher(user.user_id)
        return compute_assignment_stats(
            user.role, user.user_id, records, open_when_unassigned=open_flag
        )
