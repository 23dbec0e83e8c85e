from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from app.schemas.attendance import AttendanceRecord


class AttendanceRepo(ABC):
    @abstractmethod
    async def create(self, record: AttendanceRecord) -> str:
        """Store a record. Raises ConflictError when (student, class, date) already exists."""
        raise NotImplementedError

    @abstractmethod
    async def find(
        self,
        student_id: Optional[str] = None,
        marked_by: Optional[str] = None,
        semester: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        """Return matching records, newest date first. None filters are ignored."""
        raise NotImplementedError
