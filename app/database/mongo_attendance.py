# app/database/mongo_attendance.py
from typing import Optional, Sequence

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from app.core.errors import ConflictError
from app.database.attendance_repo import AttendanceRepo
from app.schemas.attendance import AttendanceRecord

DUPLICATE_MESSAGE = "Attendance already marked for this student on this date for this class"


class MongoAttendanceRepository(AttendanceRepo):
    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db["attendance"]

    def _from_doc(self, d: dict) -> AttendanceRecord:
        return AttendanceRecord(**{k: v for k, v in d.items() if k != "_id"})

    async def create(self, record: AttendanceRecord) -> str:
        try:
            await self.col.insert_one(record.model_dump())
        except DuplicateKeyError:
            raise ConflictError(DUPLICATE_MESSAGE)
        return record.id

    async def find(
        self,
        student_id: Optional[str] = None,
        marked_by: Optional[str] = None,
        semester: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        filt = {}
        if student_id is not None:
            filt["studentId"] = str(student_id)
        if marked_by is not None:
            filt["markedBy"] = str(marked_by)
        if semester is not None:
            filt["semester"] = semester
        cursor = self.col.find(filt).sort("date", -1)
        return [self._from_doc(d) async for d in cursor]

    async def ensure_indexes(self):
        await self.col.create_index("id", unique=True)
        await self.col.create_index(
            [("studentId", 1), ("className", 1), ("date", 1)], unique=True
        )
        await self.col.create_index([("markedBy", 1), ("semester", 1)])
