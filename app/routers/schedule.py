from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from app.core.deps import get_schedule_repo
from app.database.schedule_repo import ScheduleRepo
from app.schemas.context import UserContext
from app.schemas.schedule import ScheduleCreate, ScheduleUpdate
from app.services.auth_service import AuthService
from app.services.common import require_id
from app.services.schedule_service import ScheduleService

router = APIRouter()

RepoDep = Annotated[ScheduleRepo, Depends(get_schedule_repo)]
UserDep = Annotated[UserContext, Depends(AuthService.get_current_user)]


@router.get("/schedule")
async def list_schedules_endpoint(user: UserDep, repo: RepoDep):
    schedules = await ScheduleService.list_entries(user, repo)
    return {"success": True, "schedules": schedules}


@router.get("/schedule/stats")
async def schedule_stats_endpoint(user: UserDep, repo: RepoDep):
    stats = await ScheduleService.stats(user, repo)
    return {"success": True, **stats.model_dump()}


@router.get("/schedule/{entry_id}")
async def get_schedule_endpoint(entry_id: str, user: UserDep, repo: RepoDep):
    result = await ScheduleService.get_entry(require_id(entry_id), user, repo)
    if result is None:
        raise HTTPException(status_code=404, detail="Schedule not found")
    return {"success": True, "schedule": result}


@router.post("/schedule", status_code=status.HTTP_201_CREATED)
async def create_schedule_endpoint(payload: ScheduleCreate, user: UserDep, repo: RepoDep):
    entry = await ScheduleService.create_entry(payload, user, repo)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({
            "success": True,
            "message": "Class schedule added successfully",
            "schedule": entry,
        }),
        headers={"Location": f"/api/schedule/{entry.id}"},
    )


@router.put("/schedule/{entry_id}")
async def update_schedule_endpoint(entry_id: str, payload: ScheduleUpdate, user: UserDep, repo: RepoDep):
    entry = await ScheduleService.update_entry(require_id(entry_id), payload, user, repo)
    return {"success": True, "message": "Class schedule updated successfully", "schedule": entry}


@router.delete("/schedule/{entry_id}")
async def delete_schedule_endpoint(entry_id: str, user: UserDep, repo: RepoDep):
    deleted = await ScheduleService.delete_entry(require_id(entry_id), user, repo)
    if not deleted:
        raise HTTPException(status_code=404, detail="Schedule not found")
    return {"success": True, "message": "Class schedule deleted successfully"}
