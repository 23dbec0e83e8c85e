# app/services/note_service.py
import logging
import math
from typing import Any, List, Optional, Tuple

from app.core import validators
from app.core.config import settings
from app.core.errors import NotFoundError, ValidationError
from app.core.policy import authorize
from app.database.file_store import FileStore, StoredFile
from app.database.note_repo import NoteRepo
from app.schemas.context import UserContext
from app.schemas.note import NOTE_CATEGORIES, Note, NoteUpdate, NoteView, Pagination
from app.services.common import check_upload, new_id, utcnow

logger = logging.getLogger("portal.notes")

MAX_PAGE_SIZE = 100


class NoteService:

    @staticmethod
    async def list_notes(
        user: UserContext,
        repo: NoteRepo,
        page: int = 1,
        limit: int = 10,
        category: str = "all",
        search: str = "",
    ) -> Tuple[List[NoteView], Pagination]:
        authorize(user, "note", "list")
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        category = validators.enum_value(category, NOTE_CATEGORIES) or "all"
        search = validators.bounded_string(search, 100) or ""

        items, total = await repo.find_visible(user.user_id, category, search, (page - 1) * limit, limit)
        pagination = Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit))
        return [NoteView.for_user(n, user.user_id) for n in items], pagination

    @staticmethod
    async def _visible(note_id: str, user: UserContext, repo: NoteRepo) -> Note:
        note = await repo.find_one(note_id)
        # private notes are hidden from everybody but their author and admins
        if note is None or (not note.isPublic and note.authorId != user.user_id and user.role != "admin"):
            raise NotFoundError("Note not found")
        return note

    @staticmethod
    async def get_note(note_id: str, user: UserContext, repo: NoteRepo) -> NoteView:
        authorize(user, "note", "read")
        note = await NoteService._visible(note_id, user, repo)
        return NoteView.for_user(note, user.user_id)

    @staticmethod
    async def upload(
        user: UserContext,
        repo: NoteRepo,
        files: FileStore,
        data: bytes,
        file_name: Optional[str],
        content_type: Optional[str],
        title: Any,
        subject: Any,
        description: Any,
        tags: Any = None,
        is_public: Any = None,
    ) -> NoteView:
        authorize(user, "note", "create")

        title = validators.bounded_string(title, 200)
        subject = validators.bounded_string(subject, 100)
        description = validators.bounded_string(description, 2000)
        if not (title and subject and description):
            raise ValidationError("Title, subject, and description are required")
        check_upload(data, content_type or "", settings.note_mime_types, settings.max_upload_bytes)
        file_name = validators.bounded_string(file_name, 255) or "note"

        file_id = await files.put(
            data, file_name, content_type,
            metadata={"originalName": file_name, "uploadedBy": user.user_id},
        )
        note = Note(
            id=new_id(),
            title=title,
            subject=subject,
            description=description,
            authorId=user.user_id,
            authorName=user.username,
            uploadDate=utcnow(),
            fileId=file_id,
            fileName=file_name,
            fileType=content_type,
            fileSize=len(data),
            tags=validators.tags(tags),
            isPublic=str(is_public).lower() != "false",
        )
        await repo.create(note)
        logger.info("Note %s uploaded by %s", note.id, user.user_id)
        return NoteView.for_user(note, user.user_id)

    @staticmethod
    async def update(note_id: str, data: NoteUpdate, user: UserContext, repo: NoteRepo) -> NoteView:
        note = await NoteService._visible(note_id, user, repo)
        authorize(user, "note", "update", owner_id=note.authorId,
                  message="Not authorized to update this note")

        fields: dict = {}
        for name, limit in (("title", 200), ("subject", 100), ("description", 2000)):
            raw = getattr(data, name)
            if raw is not None:
                value = validators.bounded_string(raw, limit)
                if value is None:
                    raise ValidationError(f"{name} cannot be empty")
                fields[name] = value
        if data.tags is not None:
            fields["tags"] = validators.tags(data.tags)
        if data.isPublic is not None:
            fields["isPublic"] = data.isPublic

        if fields:
            await repo.update(note.id, fields)
        return NoteView.for_user(note.model_copy(update=fields), user.user_id)

    @staticmethod
    async def delete(note_id: str, user: UserContext, repo: NoteRepo, files: FileStore) -> None:
        note = await NoteService._visible(note_id, user, repo)
        authorize(user, "note", "delete", owner_id=note.authorId,
                  message="Not authorized to delete this note")
        await files.delete(note.fileId)
        await repo.delete(note.id)
        logger.info("Note %s deleted by %s", note.id, user.user_id)

    @staticmethod
    async def toggle(note_id: str, field: str, user: UserContext, repo: NoteRepo) -> bool:
        authorize(user, "note", "interact")
        await NoteService._visible(note_id, user, repo)
        state = await repo.toggle_member(note_id, field, user.user_id)
        if state is None:
            raise NotFoundError("Note not found")
        return state

    @staticmethod
    async def rate(note_id: str, rating: Any, user: UserContext, repo: NoteRepo) -> Tuple[float, int]:
        authorize(user, "note", "interact")
        value = validators.bounded_int(rating, 1, 5)
        if value is None:
            raise ValidationError("Rating must be between 1 and 5")
        await NoteService._visible(note_id, user, repo)
        note = await repo.set_rating(note_id, user.user_id, value)
        if note is None:
            raise NotFoundError("Note not found")
        return note.average_rating, value

    @staticmethod
    async def download(note_id: str, user: UserContext, repo: NoteRepo, files: FileStore) -> StoredFile:
        authorize(user, "note", "download")
        note = await NoteService._visible(note_id, user, repo)
        stored = await files.get(note.fileId)
        if stored is None:
            raise NotFoundError("File not found")
        await repo.increment_downloads(note.id)
        stored.filename = note.fileName
        stored.content_type = note.fileType
        return stored
