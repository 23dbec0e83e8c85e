from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from app.schemas.note import Note


class NoteRepo(ABC):
    @abstractmethod
    async def create(self, note: Note) -> str:
        raise NotImplementedError

    @abstractmethod
    async def find_one(self, note_id: str) -> Optional[Note]:
        raise NotImplementedError

    @abstractmethod
    async def find_visible(self, user_id: str, category: str, search: str,
                           skip: int, limit: int) -> Tuple[List[Note], int]:
        """Return one page of notes visible to `user_id` plus the total match count.

        Visible means public or authored by the caller. `category` narrows to
        "my", "bookmarked" or "popular" notes; `search` is a case-insensitive
        substring over title, subject, description and tags. Newest first.
        """
        raise NotImplementedError

    @abstractmethod
    async def update(self, note_id: str, fields: dict) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, note_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def toggle_member(self, note_id: str, field: str, user_id: str) -> Optional[bool]:
        """Add or remove `user_id` in the `bookmarks` or `likes` list.

        Returns the new membership, or None when the note does not exist.
        """
        raise NotImplementedError

    @abstractmethod
    async def set_rating(self, note_id: str, user_id: str, rating: int) -> Optional[Note]:
        """Replace the user's rating and return the updated note (None if missing)."""
        raise NotImplementedError

    @abstractmethod
    async def increment_downloads(self, note_id: str) -> None:
        raise NotImplementedError
