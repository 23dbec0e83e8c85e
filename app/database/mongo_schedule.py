# app/database/mongo_schedule.py
from typing import Optional, Sequence

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.database.schedule_repo import ScheduleRepo
from app.schemas.schedule import ScheduleEntry


class MongoScheduleRepository(ScheduleRepo):
    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db["schedules"]

    def _from_doc(self, d: dict) -> ScheduleEntry:
        return ScheduleEntry(**{k: v for k, v in d.items() if k != "_id"})

    async def _find(self, filt: dict) -> Sequence[ScheduleEntry]:
        cursor = self.col.find(filt).sort("startTime", 1)
        return [self._from_doc(d) async for d in cursor]

    async def create(self, entry: ScheduleEntry) -> str:
        await self.col.insert_one(entry.model_dump())
        return entry.id

    async def find_all(self) -> Sequence[ScheduleEntry]:
        return await self._find({})

    async def find_for_owner(self, owner_id: str) -> Sequence[ScheduleEntry]:
        return await self._find({"userId": str(owner_id)})

    async def find_for_owner_day(self, owner_id: str, day: str) -> Sequence[ScheduleEntry]:
        return await self._find({"userId": str(owner_id), "dayOfWeek": day})

    async def find_one(self, entry_id: str) -> Optional[ScheduleEntry]:
        d = await self.col.find_one({"id": str(entry_id)})
        return self._from_doc(d) if d else None

    async def update(self, entry_id: str, fields: dict) -> bool:
        res = await self.col.update_one({"id": str(entry_id)}, {"$set": fields})
        return res.matched_count > 0

    async def delete(self, entry_id: str) -> bool:
        res = await self.col.delete_one({"id": str(entry_id)})
        return res.deleted_count > 0

    async def ensure_indexes(self):
        await self.col.create_index("id", unique=True)
        await self.col.create_index([("userId", 1), ("dayOfWeek", 1)])
