from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.core.deps import get_assignment_repo, get_submission_files
from app.database.assignment_repo import AssignmentRepo
from app.database.file_store import FileStore
from app.schemas.assignment import AssignmentCreate, AssignmentUpdate, GradeRequest, SubmissionCreate
from app.schemas.context import UserContext
from app.services.assignment_service import AssignmentService
from app.services.auth_service import AuthService
from app.services.common import attachment_headers, require_id

router = APIRouter()

RepoDep = Annotated[AssignmentRepo, Depends(get_assignment_repo)]
UserDep = Annotated[UserContext, Depends(AuthService.get_current_user)]
FilesDep = Annotated[FileStore, Depends(get_submission_files)]


@router.get("/assignments/stats")
async def assignment_stats_endpoint(user: UserDep, repo: RepoDep):
    stats = await AssignmentService.stats(user, repo)
    return {"success": True, **stats.model_dump()}


@router.get("/assignments")
async def list_assignments_endpoint(user: UserDep, repo: RepoDep):
    assignments = await AssignmentService.list_assignments(user, repo)
    return {"success": True, "assignments": assignments}


@router.post("/assignments", status_code=status.HTTP_201_CREATED)
async def create_assignment_endpoint(assignment: AssignmentCreate, user: UserDep, repo: RepoDep):
    created = await AssignmentService.create_assignment(assignment, user, repo)
    location = f"/api/assignments/{created.id}"
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({
            "success": True,
            "message": "Assignment created successfully",
            "assignment": created,
        }),
        headers={"Location": location},
    )


@router.get("/assignments/download/{assignment_id}/{student_id}")
async def download_submission_endpoint(
    assignment_id: str,
    student_id: str,
    user: UserDep,
    repo: RepoDep,
    files: FilesDep,
):
    stored = await AssignmentService.download(require_id(assignment_id), student_id, user, repo, files)
    return Response(
        content=stored.data,
        media_type=stored.content_type,
        headers=attachment_headers(stored.filename),
    )


@router.get("/assignments/{assignment_id}")
async def get_assignment_endpoint(assignment_id: str, user: UserDep, repo: RepoDep):
    result = await AssignmentService.get_assignment(require_id(assignment_id), user, repo)
    if result is None:
        raise HTTPException(status_code=404, detail="Assignment not found")
    return {"success": True, "assignment": result}


@router.put("/assignments/{assignment_id}")
async def update_assignment_endpoint(
    assignment_id: str,
    payload: AssignmentUpdate,
    user: UserDep,
    repo: RepoDep,
):
    updated = await AssignmentService.update_assignment(require_id(assignment_id), payload, user, repo)
    return {"success": True, "message": "Assignment updated successfully", "assignment": updated}


@router.delete("/assignments/{assignment_id}")
async def delete_assignment_endpoint(assignment_id: str, user: UserDep, repo: RepoDep, files: FilesDep):
    deleted = await AssignmentService.delete_assignment(require_id(assignment_id), user, repo, files)
    if not deleted:
        raise HTTPException(status_code=404, detail="Assignment not found")
    return {"success": True, "message": "Assignment deleted successfully"}


@router.post("/assignments/{assignment_id}/submit")
async def submit_assignment_endpoint(
    assignment_id: str,
    payload: SubmissionCreate,
    user: UserDep,
    repo: RepoDep,
    files: FilesDep,
):
    submission = await AssignmentService.submit(require_id(assignment_id), payload, user, repo, files)
    return {"success": True, "message": "Assignment submitted successfully", "submission": submission}


@router.post("/assignments/{assignment_id}/grade/{student_id}")
async def grade_submission_endpoint(
    assignment_id: str,
    student_id: str,
    payload: GradeRequest,
    user: UserDep,
    repo: RepoDep,
):
    graded = await AssignmentService.grade(require_id(assignment_id), student_id, payload, user, repo)
    return {"success": True, "message": "Submission graded successfully", "submission": graded}
