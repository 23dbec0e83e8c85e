from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.deps import get_note_files, get_note_repo
from app.core.errors import ValidationError
from app.database.file_store import FileStore
from app.database.note_repo import NoteRepo
from app.schemas.context import UserContext
from app.schemas.note import NoteUpdate, RateRequest
from app.services.auth_service import AuthService
from app.services.common import attachment_headers, require_id
from app.services.note_service import NoteService

router = APIRouter()

RepoDep = Annotated[NoteRepo, Depends(get_note_repo)]
UserDep = Annotated[UserContext, Depends(AuthService.get_current_user)]
FilesDep = Annotated[FileStore, Depends(get_note_files)]


@router.get("/notes")
async def list_notes_endpoint(
    user: UserDep,
    repo: RepoDep,
    page: int = 1,
    limit: int = 10,
    category: str = "all",
    search: str = "",
):
    notes, pagination = await NoteService.list_notes(user, repo, page, limit, category, search)
    return {"success": True, "notes": notes, "pagination": pagination}


@router.post("/notes", status_code=status.HTTP_201_CREATED)
@router.post("/notes/upload", status_code=status.HTTP_201_CREATED)
async def upload_note_endpoint(
    user: UserDep,
    repo: RepoDep,
    files: FilesDep,
    file: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    subject: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    isPublic: Optional[str] = Form(None),
):
    if file is None:
        raise ValidationError("No file uploaded")
    # at most limit + 1 bytes are read; check_upload rejects anything over the limit
    data = await file.read(settings.max_upload_bytes + 1)
    note = await NoteService.upload(
        user, repo, files, data, file.filename, file.content_type,
        title, subject, description, tags, isPublic,
    )
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({"success": True, "message": "Note uploaded successfully", "note": note}),
    )


@router.get("/notes/{note_id}")
async def get_note_endpoint(note_id: str, user: UserDep, repo: RepoDep):
    note = await NoteService.get_note(require_id(note_id), user, repo)
    return {"success": True, "note": note}


@router.put("/notes/{note_id}")
async def update_note_endpoint(note_id: str, payload: NoteUpdate, user: UserDep, repo: RepoDep):
    note = await NoteService.update(require_id(note_id), payload, user, repo)
    return {"success": True, "message": "Note updated successfully", "note": note}


@router.delete("/notes/{note_id}")
async def delete_note_endpoint(note_id: str, user: UserDep, repo: RepoDep, files: FilesDep):
    await NoteService.delete(require_id(note_id), user, repo, files)
    return {"success": True, "message": "Note deleted successfully"}


@router.post("/notes/{note_id}/bookmark")
async def bookmark_note_endpoint(note_id: str, user: UserDep, repo: RepoDep):
    state = await NoteService.toggle(require_id(note_id), "bookmarks", user, repo)
    return {
        "success": True,
        "message": "Bookmark added" if state else "Bookmark removed",
        "isBookmarked": state,
    }


@router.post("/notes/{note_id}/like")
async def like_note_endpoint(note_id: str, user: UserDep, repo: RepoDep):
    state = await NoteService.toggle(require_id(note_id), "likes", user, repo)
    return {"success": True, "message": "Like added" if state else "Like removed", "isLiked": state}


@router.post("/notes/{note_id}/rate")
async def rate_note_endpoint(note_id: str, payload: RateRequest, user: UserDep, repo: RepoDep):
    average, own = await NoteService.rate(require_id(note_id), payload.rating, user, repo)
    return {
        "success": True,
        "message": "Rating submitted successfully",
        "averageRating": average,
        "userRating": own,
    }


@router.get("/notes/{note_id}/download")
async def download_note_endpoint(note_id: str, user: UserDep, repo: RepoDep, files: FilesDep):
    stored = await NoteService.download(require_id(note_id), user, repo, files)
    return Response(
        content=stored.data,
        media_type=stored.content_type,
        headers=attachment_headers(stored.filename),
    )
