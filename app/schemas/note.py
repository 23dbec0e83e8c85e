from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field

NOTE_CATEGORIES = ("all", "my", "bookmarked", "popular")
POPULAR_DOWNLOADS = 50


class NoteRating(BaseModel):
    userId: str
    rating: int


class NoteUpdate(BaseModel):
    title: Optional[str] = None
    subject: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    isPublic: Optional[bool] = None


class RateRequest(BaseModel):
    rating: Any = None


class Note(BaseModel):
    id: str
    title: str
    subject: str
    description: str
    authorId: str
    authorName: str = ""
    uploadDate: datetime
    downloads: int = 0
    fileId: str
    fileName: str
    fileType: str
    fileSize: int = 0
    tags: List[str] = Field(default_factory=list)
    isPublic: bool = True
    bookmarks: List[str] = Field(default_factory=list)
    likes: List[str] = Field(default_factory=list)
    ratings: List[NoteRating] = Field(default_factory=list)

    @property
    def average_rating(self) -> float:
        if not self.ratings:
            return 0.0
        return round(sum(r.rating for r in self.ratings) / len(self.ratings), 1)


class NoteView(BaseModel):
    """A note as seen by one caller."""
    id: str
    title: str
    subject: str
    description: str
    authorId: str
    authorName: str
    uploadDate: datetime
    downloads: int
    fileName: str
    fileType: str
    fileSize: int
    tags: List[str]
    isPublic: bool
    likes: int
    rating: float
    isBookmarked: bool
    isLiked: bool
    userRating: int

    @classmethod
    def for_user(cls, note: Note, user_id: str) -> "NoteView":
        own = next((r.rating for r in note.ratings if r.userId == user_id), 0)
        return cls(
            id=note.id, title=note.title, subject=note.subject,
            description=note.description, authorId=note.authorId,
            authorName=note.authorName, uploadDate=note.uploadDate,
            downloads=note.downloads, fileName=note.fileName,
            fileType=note.fileType, fileSize=note.fileSize, tags=note.tags,
            isPublic=note.isPublic, likes=len(note.likes),
            rating=note.average_rating,
            isBookmarked=user_id in note.bookmarks,
            isLiked=user_id in note.likes,
            userRating=own,
        )


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
