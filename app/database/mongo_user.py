# app/database/mongo_user.py
from typing import Dict, Iterable, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from app.core.errors import ConflictError
from app.database.user_repo import UserRepo
from app.schemas.user import User


class MongoUserRepository(UserRepo):
    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db["users"]

    def _from_doc(self, d: dict) -> User:
        return User(**{k: v for k, v in d.items() if k != "_id"})

    async def create(self, user: User) -> str:
        try:
            await self.col.insert_one(user.model_dump())
        except DuplicateKeyError:
            raise ConflictError("User with this email or username already exists")
        return user.id

    async def find_one(self, user_id: str) -> Optional[User]:
        d = await self.col.find_one({"id": str(user_id)})
        return self._from_doc(d) if d else None

    async def find_by_email(self, email: str) -> Optional[User]:
        d = await self.col.find_one({"email": email})
        return self._from_doc(d) if d else None

    async def find_by_identity(self, email: str, username: str,
                               exclude_id: Optional[str] = None) -> Optional[User]:
        filt: dict = {"$or": [{"email": email}, {"username": username}]}
        if exclude_id is not None:
            filt["id"] = {"$ne": str(exclude_id)}
        d = await self.col.find_one(filt)
        return self._from_doc(d) if d else None

    async def usernames(self, user_ids: Iterable[str]) -> Dict[str, str]:
        ids = list({str(i) for i in user_ids})
        if not ids:
            return {}
        cursor = self.col.find({"id": {"$in": ids}}, {"id": 1, "username": 1})
        return {d["id"]: d["username"] async for d in cursor}

    async def update(self, user_id: str, fields: dict) -> bool:
        try:
            res = await self.col.update_one({"id": str(user_id)}, {"$set": fields})
        except DuplicateKeyError:
            raise ConflictError("Username or email already taken")
        return res.matched_count > 0

    async def ensure_indexes(self):
        await self.col.create_index("id", unique=True)
        await self.col.create_index("email", unique=True)
        await self.col.create_index("username", unique=True)
