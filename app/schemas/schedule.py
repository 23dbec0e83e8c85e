from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from app.core.validators import hex_color

DEFAULT_COLOR = "#4F46E5"


class ScheduleCreate(BaseModel):
    className: Optional[str] = None
    professor: Optional[str] = None
    dayOfWeek: Optional[str] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    location: Optional[str] = None
    color: Optional[str] = None


class ScheduleUpdate(ScheduleCreate):
    pass


class ScheduleEntry(BaseModel):
    id: str
    userId: str
    className: str
    professor: str
    dayOfWeek: str
    startTime: str
    endTime: str
    location: str
    color: str = DEFAULT_COLOR
    createdAt: datetime
    updatedAt: datetime

    @field_validator("color", mode="before")
    @classmethod
    def _color_or_default(cls, v):
        return hex_color(v) or DEFAULT_COLOR
