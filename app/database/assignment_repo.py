from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Sequence

from app.schemas.assignment import Assignment, Submission


class AssignmentRepo(ABC):
    @abstractmethod
    async def create(self, assignment: Assignment) -> str:
        """Store a fully built assignment and return its id."""
        raise NotImplementedError

    @abstractmethod
    async def find_all(self) -> Sequence[Assignment]:
        """Return every assignment."""
        raise NotImplementedError

    @abstractmethod
    async def find_for_teacher(self, teacher_id: str) -> Sequence[Assignment]:
        """Return the assignments created by a teacher."""
        raise NotImplementedError

    @abstractmethod
    async def find_for_student(self, student_id: str, include_unassigned: bool) -> Sequence[Assignment]:
        """Return the assignments addressed to a student.

        With `include_unassigned` the assignments with an empty assignedTo
        list are returned too.
        """
        raise NotImplementedError

    @abstractmethod
    async def find_one(self, assignment_id: str) -> Optional[Assignment]:
        """Return an assignment by id, or None."""
        raise NotImplementedError

    @abstractmethod
    async def update(self, assignment_id: str, fields: dict) -> bool:
        """Set top-level fields. Returns True if the assignment exists."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, assignment_id: str) -> bool:
        """Delete an assignment. Returns True if something was deleted."""
        raise NotImplementedError

    @abstractmethod
    async def add_submission(self, assignment_id: str, submission: Submission) -> bool:
        """Append a submission unless the student already has one.

        Returns False when the assignment is missing or a submission for the
        same student is already there.
        """
        raise NotImplementedError

    @abstractmethod
    async def replace_submission(self, assignment_id: str, submission: Submission) -> bool:
        """Overwrite the student's existing ungraded submission."""
        raise NotImplementedError

    @abstractmethod
    async def set_grade(self, assignment_id: str, student_id: str, score: int,
                        feedback: str, graded_at: datetime, graded_by: str) -> bool:
        """Write the grade fields on a student's submission."""
        raise NotImplementedError
