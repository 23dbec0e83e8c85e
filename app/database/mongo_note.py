# app/database/mongo_note.py
import re
from typing import List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.database.note_repo import NoteRepo
from app.schemas.note import POPULAR_DOWNLOADS, Note


class MongoNoteRepository(NoteRepo):
    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db["notes"]

    def _from_doc(self, d: dict) -> Note:
        return Note(**{k: v for k, v in d.items() if k != "_id"})

    def _visible_filter(self, user_id: str, category: str, search: str) -> dict:
        clauses: List[dict] = [{"$or": [{"isPublic": True}, {"authorId": user_id}]}]
        if category == "my":
            clauses.append({"authorId": user_id})
        elif category == "bookmarked":
            clauses.append({"bookmarks": user_id})
        elif category == "popular":
            clauses.append({"downloads": {"$gte": POPULAR_DOWNLOADS}})
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            clauses.append({"$or": [
                {"title": pattern},
                {"subject": pattern},
                {"description": pattern},
                {"tags": pattern},
            ]})
        return {"$and": clauses}

    async def create(self, note: Note) -> str:
        await self.col.insert_one(note.model_dump())
        return note.id

    async def find_one(self, note_id: str) -> Optional[Note]:
        d = await self.col.find_one({"id": str(note_id)})
        return self._from_doc(d) if d else None

    async def find_visible(self, user_id: str, category: str, search: str,
                           skip: int, limit: int) -> Tuple[List[Note], int]:
        filt = self._visible_filter(user_id, category, search)
        cursor = (
            self.col.find(filt)
            .sort([("uploadDate", -1), ("downloads", -1)])
            .skip(skip)
            .limit(limit)
        )
        items = [self._from_doc(d) async for d in cursor]
        total = await self.col.count_documents(filt)
        return items, total

    async def update(self, note_id: str, fields: dict) -> bool:
        res = await self.col.update_one({"id": str(note_id)}, {"$set": fields})
        return res.matched_count > 0

    async def delete(self, note_id: str) -> bool:
        res = await self.col.delete_one({"id": str(note_id)})
        return res.deleted_count > 0

    async def toggle_member(self, note_id: str, field: str, user_id: str) -> Optional[bool]:
        if field not in ("bookmarks", "likes"):
            raise ValueError(f"cannot toggle {field}")
        d = await self.col.find_one({"id": str(note_id)}, {field: 1})
        if not d:
            return None
        if user_id in d.get(field, []):
            await self.col.update_one({"id": str(note_id)}, {"$pull": {field: user_id}})
            return False
        await self.col.update_one({"id": str(note_id)}, {"$addToSet": {field: user_id}})
        return True

    async def _replace_rating(self, note_id: str, user_id: str, rating: int) -> bool:
        res = await self.col.update_one(
            {"id": str(note_id), "ratings.userId": user_id},
            {"$set": {"ratings.$.rating": rating}},
        )
        return res.matched_count > 0

    async def set_rating(self, note_id: str, user_id: str, rating: int) -> Optional[Note]:
        # each write is guarded on the user's entry so a user never holds two ratings
        if not await self._replace_rating(note_id, user_id, rating):
            res = await self.col.update_one(
                {"id": str(note_id), "ratings.userId": {"$ne": user_id}},
                {"$push": {"ratings": {"userId": user_id, "rating": rating}}},
            )
            # a concurrent request added this user's entry first
            if res.matched_count == 0 and not await self._replace_rating(note_id, user_id, rating):
                return None
        return await self.find_one(note_id)

    async def increment_downloads(self, note_id: str) -> None:
        await self.col.update_one({"id": str(note_id)}, {"$inc": {"downloads": 1}})

    async def ensure_indexes(self):
        await self.col.create_index("id", unique=True)
        await self.col.create_index("authorId")
        await self.col.create_index([("uploadDate", -1), ("downloads", -1)])
