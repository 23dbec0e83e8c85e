# app/services/schedule_service.py
import logging
from typing import List, Optional, Sequence

from app.core import validators
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.policy import FULL, authorize
from app.database.schedule_repo import ScheduleRepo
from app.schemas.context import UserContext
from app.schemas.schedule import DEFAULT_COLOR, ScheduleCreate, ScheduleEntry, ScheduleUpdate
from app.schemas.stats import ScheduleStats
from app.services.common import new_id, utcnow
from app.services.stats_service import compute_schedule_stats

logger = logging.getLogger("portal.schedule")

TEXT_FIELDS = ("className", "professor", "location")
REQUIRED_FIELDS = TEXT_FIELDS + ("dayOfWeek", "startTime", "endTime")


def _sort_key(entry: ScheduleEntry):
    return validators.DAYS_OF_WEEK.index(entry.dayOfWeek), entry.startTime


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open interval intersection: touching ends do not overlap."""
    return a_start < b_end and a_end > b_start


def _normalize_field(name: str, raw) -> str:
    if name in TEXT_FIELDS:
        value = validators.bounded_string(raw, 100)
    elif name == "dayOfWeek":
        value = validators.day_of_week(raw)
        if value is None:
            raise ValidationError("Day of week must be one of: " + ", ".join(validators.DAYS_OF_WEEK))
    else:
        value = validators.time_of_day(raw)
        if value is None:
            raise ValidationError("Times must use the HH:MM format")
    if value is None:
        raise ValidationError("Please provide all required fields")
    return value


def _is_blank(raw) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


class ScheduleService:

    @staticmethod
    async def _check_slot(repo: ScheduleRepo, owner_id: str, day: str, start: str, end: str,
                          exclude_id: Optional[str] = None) -> None:
        start_min = validators.time_to_minutes(start)
        end_min = validators.time_to_minutes(end)
        if end_min <= start_min:
            raise ValidationError("End time must be after start time")

        for existing in await repo.find_for_owner_day(owner_id, day):
            if existing.id == exclude_id:
                continue
            if overlaps(validators.time_to_minutes(existing.startTime),
                        validators.time_to_minutes(existing.endTime),
                        start_min, end_min):
                raise ConflictError(
                    f"Schedule conflicts with {existing.className} "
                    f"({existing.startTime}-{existing.endTime})"
                )

    @staticmethod
    async def list_entries(user: UserContext, repo: ScheduleRepo) -> List[ScheduleEntry]:
        decision = authorize(user, "schedule", "list")
        if decision is FULL:
            entries = await repo.find_all()
        else:
            entries = await repo.find_for_owner(user.user_id)
        return sorted(entries, key=_sort_key)

    @staticmethod
    async def get_entry(entry_id: str, user: UserContext, repo: ScheduleRepo) -> Optional[ScheduleEntry]:
        entry = await repo.find_one(entry_id)
        if entry is None:
            return None
        authorize(user, "schedule", "read", owner_id=entry.userId,
                  message="You do not have access to this schedule")
        return entry

    @staticmethod
    async def create_entry(data: ScheduleCreate, user: UserContext, repo: ScheduleRepo) -> ScheduleEntry:
        authorize(user, "schedule", "create", message="Students cannot create class schedules")

        raw = data.model_dump()
        if any(_is_blank(raw[name]) for name in REQUIRED_FIELDS):
            raise ValidationError("Please provide all required fields")
        fields = {name: _normalize_field(name, raw[name]) for name in REQUIRED_FIELDS}
        fields["color"] = validators.hex_color(data.color) or DEFAULT_COLOR

        await ScheduleService._check_slot(
            repo, user.user_id, fields["dayOfWeek"], fields["startTime"], fields["endTime"]
        )

        now = utcnow()
        entry = ScheduleEntry(id=new_id(), userId=user.user_id, createdAt=now, updatedAt=now, **fields)
        await repo.create(entry)
        logger.info("Schedule %s created by %s", entry.id, user.user_id)
        return entry

    @staticmethod
    async def update_entry(entry_id: str, data: ScheduleUpdate, user: UserContext,
                           repo: ScheduleRepo) -> ScheduleEntry:
        authorize(user, "schedule", "update", message="Students cannot update class schedules")
        entry = await repo.find_one(entry_id)
        if entry is None:
            raise NotFoundError("Schedule not found")
        authorize(user, "schedule", "update", owner_id=entry.userId,
                  message="You do not have permission to edit this schedule")

        raw = data.model_dump()
        fields = {
            name: _normalize_field(name, raw[name])
            for name in REQUIRED_FIELDS
            if not _is_blank(raw[name])
        }
        if not _is_blank(data.color):
            fields["color"] = validators.hex_color(data.color) or DEFAULT_COLOR

        merged = entry.model_copy(update=fields)
        await ScheduleService._check_slot(
            repo, entry.userId, merged.dayOfWeek, merged.startTime, merged.endTime,
            exclude_id=entry.id,
        )

        fields["updatedAt"] = utcnow()
        await repo.update(entry.id, fields)
        logger.info("Schedule %s updated by %s", entry.id, user.user_id)
        return merged.model_copy(update={"updatedAt": fields["updatedAt"]})

    @staticmethod
    async def delete_entry(entry_id: str, user: UserContext, repo: ScheduleRepo) -> bool:
        authorize(user, "schedule", "delete", message="Students cannot delete class schedules")
        entry = await repo.find_one(entry_id)
        if entry is None:
            return False
        authorize(user, "schedule", "delete", owner_id=entry.userId,
                  message="You do not have permission to delete this schedule")
        deleted = await repo.delete(entry.id)
        if deleted:
            logger.info("Schedule %s deleted by %s", entry.id, user.user_id)
        return deleted

    @staticmethod
    async def stats(user: UserContext, repo: ScheduleRepo) -> ScheduleStats:
        entries: Sequence[ScheduleEntry] = await ScheduleService.list_entries(user, repo)
        return compute_schedule_stats(user.role, user.user_id, entries)
