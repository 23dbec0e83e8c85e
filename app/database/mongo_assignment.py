# app/database/mongo_assignment.py
from datetime import datetime
from typing import List, Optional, Sequence

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.database.assignment_repo import AssignmentRepo
from app.schemas.assignment import Assignment, Submission


class MongoAssignmentRepository(AssignmentRepo):
    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db["assignments"]

    def _from_doc(self, d: dict) -> Assignment:
        base = {k: v for k, v in d.items() if k not in {"_id"}}
        return Assignment(**base)

    async def _find(self, filt: dict, sort_field: str = "createdAt", direction: int = -1) -> List[Assignment]:
        cursor = self.col.find(filt).sort(sort_field, direction)
        return [self._from_doc(d) async for d in cursor]

    async def create(self, assignment: Assignment) -> str:
        await self.col.insert_one(assignment.model_dump())
        return assignment.id

    async def find_all(self) -> Sequence[Assignment]:
        return await self._find({})

    async def find_for_teacher(self, teacher_id: str) -> Sequence[Assignment]:
        return await self._find({"createdBy": str(teacher_id)})

    async def find_for_student(self, student_id: str, include_unassigned: bool) -> Sequence[Assignment]:
        filt: dict = {"assignedTo": str(student_id)}
        if include_unassigned:
            filt = {"$or": [filt, {"assignedTo": {"$size": 0}}]}
        return await self._find(filt, "dueDate", 1)

    async def find_one(self, assignment_id: str) -> Optional[Assignment]:
        d = await self.col.find_one({"id": str(assignment_id)})
        return self._from_doc(d) if d else None

    async def update(self, assignment_id: str, fields: dict) -> bool:
        res = await self.col.update_one({"id": str(assignment_id)}, {"$set": fields})
        return res.matched_count > 0

    async def delete(self, assignment_id: str) -> bool:
        res = await self.col.delete_one({"id": str(assignment_id)})
        return res.deleted_count > 0

    async def add_submission(self, assignment_id: str, submission: Submission) -> bool:
        # the $ne guard makes two racing submissions from one student collapse into one
        res = await self.col.update_one(
            {"id": str(assignment_id), "submissions.studentId": {"$ne": submission.studentId}},
            {"$push": {"submissions": submission.model_dump()}},
        )
        return res.modified_count > 0

    async def replace_submission(self, assignment_id: str, submission: Submission) -> bool:
        res = await self.col.update_one(
            {
                "id": str(assignment_id),
                "submissions": {"$elemMatch": {"studentId": submission.studentId, "score": None}},
            },
            {"$set": {"submissions.$": submission.model_dump()}},
        )
        return res.modified_count > 0

    async def set_grade(self, assignment_id: str, student_id: str, score: int,
                        feedback: str, graded_at: datetime, graded_by: str) -> bool:
        res = await self.col.update_one(
            {"id": str(assignment_id), "submissions.studentId": str(student_id)},
            {"$set": {
                "submissions.$.score": score,
                "submissions.$.feedback": feedback,
                "submissions.$.gradedAt": graded_at,
                "submissions.$.gradedBy": graded_by,
            }},
        )
        return res.matched_count > 0

    async def ensure_indexes(self):
        await self.col.create_index("id", unique=True)
        await self.col.create_index("createdBy")
        await self.col.create_index("assignedTo")
        await self.col.create_index([("status", 1), ("dueDate", 1)])
