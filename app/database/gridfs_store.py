# app/database/gridfs_store.py
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from gridfs.errors import NoFile
from motor.motor_asyncio import AsyncIOMotorDatabase, AsyncIOMotorGridFSBucket

from app.database.file_store import FileStore, StoredFile


class GridFSFileStore(FileStore):
    def __init__(self, db: AsyncIOMotorDatabase, bucket_name: str):
        self.bucket = AsyncIOMotorGridFSBucket(db, bucket_name=bucket_name)

    async def put(self, data: bytes, filename: str, content_type: str,
                  metadata: Optional[dict] = None) -> str:
        meta = {
            "contentType": content_type,
            "uploadDate": datetime.now(timezone.utc),
            **(metadata or {}),
        }
        file_id = await self.bucket.upload_from_stream(filename, data, metadata=meta)
        return str(file_id)

    async def get(self, file_id: str) -> Optional[StoredFile]:
        if not ObjectId.is_valid(file_id):
            return None
        try:
            grid_out = await self.bucket.open_download_stream(ObjectId(file_id))
        except NoFile:
            return None
        data = await grid_out.read()
        meta = grid_out.metadata or {}
        return StoredFile(
            data=data,
            filename=grid_out.filename,
            content_type=meta.get("contentType", "application/octet-stream"),
            metadata=meta,
        )

    async def delete(self, file_id: str) -> bool:
        if not ObjectId.is_valid(file_id):
            return False
        try:
            await self.bucket.delete(ObjectId(file_id))
        except NoFile:
            return False
        return True
