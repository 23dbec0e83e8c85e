# test/pytest/conftest.py
import pytest
from datetime import datetime, timezone
from typing import Dict, List, Optional

from bson import ObjectId

from app.core.errors import ConflictError
from app.database.file_store import StoredFile
from app.schemas.assignment import Assignment, Submission
from app.schemas.attendance import AttendanceRecord
from app.schemas.context import UserContext
from app.schemas.note import POPULAR_DOWNLOADS, Note, NoteRating
from app.schemas.schedule import ScheduleEntry
from app.schemas.user import User


def oid() -> str:
    return str(ObjectId())


# ------------------------- Fake repositories -------------------------
class FakeUserRepo:
    def __init__(self):
        self.items: Dict[str, User] = {}

    async def create(self, user: User) -> str:
        for u in self.items.values():
            if u.email == user.email or u.username == user.username:
                raise ConflictError("User with this email or username already exists")
        self.items[user.id] = user
        return user.id

    async def find_one(self, user_id: str):
        return self.items.get(user_id)

    async def find_by_email(self, email: str):
        return next((u for u in self.items.values() if u.email == email), None)

    async def find_by_identity(self, email, username, exclude_id=None):
        for u in self.items.values():
            if u.id != exclude_id and (u.email == email or u.username == username):
                return u
        return None

    async def usernames(self, user_ids):
        return {i: self.items[i].username for i in set(user_ids) if i in self.items}

    async def update(self, user_id: str, fields: dict) -> bool:
        user = self.items.get(user_id)
        if user is None:
            return False
        self.items[user_id] = user.model_copy(update=fields)
        return True

    def add(self, role: str, username: str) -> User:
        now = datetime.now(timezone.utc)
        user = User(id=oid(), username=username, email=f"{username}@example.com",
                    passwordHash="", role=role, createdAt=now, updatedAt=now)
        self.items[user.id] = user
        return user


class FakeScheduleRepo:
    def __init__(self):
        self.items: Dict[str, ScheduleEntry] = {}

    async def create(self, entry: ScheduleEntry) -> str:
        self.items[entry.id] = entry
        return entry.id

    async def find_all(self):
        return list(self.items.values())

    async def find_for_owner(self, owner_id: str):
        return [e for e in self.items.values() if e.userId == owner_id]

    async def find_for_owner_day(self, owner_id: str, day: str):
        return [e for e in self.items.values() if e.userId == owner_id and e.dayOfWeek == day]

    async def find_one(self, entry_id: str):
        return self.items.get(entry_id)

    async def update(self, entry_id: str, fields: dict) -> bool:
        if entry_id not in self.items:
            return False
        self.items[entry_id] = self.items[entry_id].model_copy(update=fields)
        return True

    async def delete(self, entry_id: str) -> bool:
        return self.items.pop(entry_id, None) is not None


class FakeAssignmentRepo:
    def __init__(self):
        self.items: Dict[str, Assignment] = {}

    async def create(self, assignment: Assignment) -> str:
        # the service must set the id
        if not assignment.id:
            raise ValueError("id must be set by the service")
        self.items[assignment.id] = assignment
        return assignment.id

    async def find_all(self):
        return list(self.items.values())

    async def find_for_teacher(self, teacher_id: str):
        return [a for a in self.items.values() if a.createdBy == teacher_id]

    async def find_for_student(self, student_id: str, include_unassigned: bool):
        return [
            a for a in self.items.values()
            if student_id in a.assignedTo or (include_unassigned and not a.assignedTo)
        ]

    async def find_one(self, assignment_id: str):
        a = self.items.get(assignment_id)
        return a.model_copy(deep=True) if a else None

    async def update(self, assignment_id: str, fields: dict) -> bool:
        if assignment_id not in self.items:
            return False
        self.items[assignment_id] = self.items[assignment_id].model_copy(update=fields)
        return True

    async def delete(self, assignment_id: str) -> bool:
        return self.items.pop(assignment_id, None) is not None

    async def add_submission(self, assignment_id: str, submission: Submission) -> bool:
        a = self.items.get(assignment_id)
        if a is None or a.submission_for(submission.studentId) is not None:
            return False
        a.submissions.append(submission)
        return True

    async def replace_submission(self, assignment_id: str, submission: Submission) -> bool:
        a = self.items.get(assignment_id)
        if a is None:
            return False
        for i, sub in enumerate(a.submissions):
            if sub.studentId == submission.studentId and not sub.is_graded:
                a.submissions[i] = submission
                return True
        return False

    async def set_grade(self, assignment_id, student_id, score, feedback, graded_at, graded_by) -> bool:
        a = self.items.get(assignment_id)
        sub = a.submission_for(student_id) if a else None
        if sub is None:
            return False
        sub.score, sub.feedback, sub.gradedAt, sub.gradedBy = score, feedback, graded_at, graded_by
        return True


class FakeAttendanceRepo:
    def __init__(self):
        self.items: List[AttendanceRecord] = []

    async def create(self, record: AttendanceRecord) -> str:
        for r in self.items:
            if (r.studentId, r.className, r.date) == (record.studentId, record.className, record.date):
                raise ConflictError("Attendance already marked for this student on this date for this class")
        self.items.append(record)
        return record.id

    async def find(self, student_id=None, marked_by=None, semester=None):
        out = [
            r for r in self.items
            if (student_id is None or r.studentId == student_id)
            and (marked_by is None or r.markedBy == marked_by)
            and (semester is None or r.semester == semester)
        ]
        return sorted(out, key=lambda r: r.date, reverse=True)


class FakeNoteRepo:
    def __init__(self):
        self.items: Dict[str, Note] = {}

    async def create(self, note: Note) -> str:
        self.items[note.id] = note
        return note.id

    async def find_one(self, note_id: str):
        return self.items.get(note_id)

    async def find_visible(self, user_id, category, search, skip, limit):
        out = [n for n in self.items.values() if n.isPublic or n.authorId == user_id]
        if category == "my":
            out = [n for n in out if n.authorId == user_id]
        elif category == "bookmarked":
            out = [n for n in out if user_id in n.bookmarks]
        elif category == "popular":
            out = [n for n in out if n.downloads >= POPULAR_DOWNLOADS]
        if search:
            s = search.lower()
            out = [
                n for n in out
                if s in n.title.lower() or s in n.subject.lower()
                or s in n.description.lower() or any(s in t.lower() for t in n.tags)
            ]
        out.sort(key=lambda n: n.uploadDate, reverse=True)
        return out[skip:skip + limit], len(out)

    async def update(self, note_id: str, fields: dict) -> bool:
        if note_id not in self.items:
            return False
        self.items[note_id] = self.items[note_id].model_copy(update=fields)
        return True

    async def delete(self, note_id: str) -> bool:
        return self.items.pop(note_id, None) is not None

    async def toggle_member(self, note_id: str, field: str, user_id: str):
        note = self.items.get(note_id)
        if note is None:
            return None
        members = getattr(note, field)
        if user_id in members:
            members.remove(user_id)
            return False
        members.append(user_id)
        return True

    async def set_rating(self, note_id: str, user_id: str, rating: int):
        note = self.items.get(note_id)
        if note is None:
            return None
        note.ratings = [r for r in note.ratings if r.userId != user_id]
        note.ratings.append(NoteRating(userId=user_id, rating=rating))
        return note

    async def increment_downloads(self, note_id: str) -> None:
        self.items[note_id].downloads += 1


class FakeFileStore:
    def __init__(self):
        self.items: Dict[str, StoredFile] = {}

    async def put(self, data: bytes, filename: str, content_type: str, metadata: Optional[dict] = None) -> str:
        file_id = oid()
        self.items[file_id] = StoredFile(data=data, filename=filename,
                                         content_type=content_type, metadata=metadata or {})
        return file_id

    async def get(self, file_id: str):
        stored = self.items.get(file_id)
        if stored is None:
            return None
        return StoredFile(data=stored.data, filename=stored.filename,
                          content_type=stored.content_type, metadata=dict(stored.metadata))

    async def delete(self, file_id: str) -> bool:
        return self.items.pop(file_id, None) is not None


# ------------------------------- Fixtures -------------------------------------
@pytest.fixture
def users():
    return FakeUserRepo()


@pytest.fixture
def schedules():
    return FakeScheduleRepo()


@pytest.fixture
def assignments():
    return FakeAssignmentRepo()


@pytest.fixture
def attendance():
    return FakeAttendanceRepo()


@pytest.fixture
def notes():
    return FakeNoteRepo()


@pytest.fixture
def files():
    return FakeFileStore()


@pytest.fixture
def teacher():
    return UserContext(user_id=oid(), role="teacher", username="teacher1")


@pytest.fixture
def other_teacher():
    return UserContext(user_id=oid(), role="teacher", username="teacher2")


@pytest.fixture
def admin():
    return UserContext(user_id=oid(), role="admin", username="admin1")


@pytest.fixture
def student():
    return UserContext(user_id=oid(), role="student", username="student1")


@pytest.fixture
def student2():
    return UserContext(user_id=oid(), role="student", username="student2")
