from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional

from app.schemas.user import User


class UserRepo(ABC):
    @abstractmethod
    async def create(self, user: User) -> str:
        """Store a user. Raises ConflictError when email or username is taken."""
        raise NotImplementedError

    @abstractmethod
    async def find_one(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def find_by_identity(self, email: str, username: str,
                               exclude_id: Optional[str] = None) -> Optional[User]:
        """Return any user (other than `exclude_id`) holding this email or username."""
        raise NotImplementedError

    @abstractmethod
    async def usernames(self, user_ids: Iterable[str]) -> Dict[str, str]:
        """Map user ids to usernames; unknown ids are left out."""
        raise NotImplementedError

    @abstractmethod
    async def update(self, user_id: str, fields: dict) -> bool:
        raise NotImplementedError
