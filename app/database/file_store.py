from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class StoredFile:
    data: bytes
    filename: str
    content_type: str
    metadata: dict = field(default_factory=dict)


class FileStore(ABC):
    @abstractmethod
    async def put(self, data: bytes, filename: str, content_type: str,
                  metadata: Optional[dict] = None) -> str:
        """Store a binary payload and return its id."""
        raise NotImplementedError

    @abstractmethod
    async def get(self, file_id: str) -> Optional[StoredFile]:
        """Return the payload, or None when it does not exist."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, file_id: str) -> bool:
        raise NotImplementedError
