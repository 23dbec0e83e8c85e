from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from app.schemas.schedule import ScheduleEntry


class ScheduleRepo(ABC):
    @abstractmethod
    async def create(self, entry: ScheduleEntry) -> str:
        """Store a schedule entry and return its id."""
        raise NotImplementedError

    @abstractmethod
    async def find_all(self) -> Sequence[ScheduleEntry]:
        raise NotImplementedError

    @abstractmethod
    async def find_for_owner(self, owner_id: str) -> Sequence[ScheduleEntry]:
        raise NotImplementedError

    @abstractmethod
    async def find_for_owner_day(self, owner_id: str, day: str) -> Sequence[ScheduleEntry]:
        """Entries of one owner on one weekday, used by the conflict check."""
        raise NotImplementedError

    @abstractmethod
    async def find_one(self, entry_id: str) -> Optional[ScheduleEntry]:
        raise NotImplementedError

    @abstractmethod
    async def update(self, entry_id: str, fields: dict) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, entry_id: str) -> bool:
        raise NotImplementedError
