# app/main.py
from contextlib import asynccontextmanager
import logging
import sys
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from motor.motor_asyncio import AsyncIOMotorClient

from app.core.config import DEFAULT_JWT_SECRET, settings
from app.core.errors import install_error_handlers
from app.core.rate_limit import AttemptLimiter
from app.database.gridfs_store import GridFSFileStore
from app.database.mongo_assignment import MongoAssignmentRepository
from app.database.mongo_attendance import MongoAttendanceRepository
from app.database.mongo_note import MongoNoteRepository
from app.database.mongo_schedule import MongoScheduleRepository
from app.database.mongo_user import MongoUserRepository
from app.routers import assignment, attendance, auth, health, notes, schedule

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s :: %(message)s",
    stream=sys.stdout,
)

logger = logging.getLogger("portal")


def _limiter(name: str) -> AttemptLimiter:
    return AttemptLimiter(
        name,
        max_attempts=settings.rate_limit_attempts,
        window_seconds=settings.rate_limit_window_seconds,
    )


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Environment: %s", settings.environment)
        logger.info("MongoDB database: %s", settings.mongo_db_name)
        logger.info("Allowed origins: %s", settings.cors_origins)
        if settings.jwt_secret == DEFAULT_JWT_SECRET:
            logger.warning("JWT_SECRET is not set, falling back to the built-in development secret")

        client = AsyncIOMotorClient(settings.mongo_uri, tz_aware=True)
        db = client[settings.mongo_db_name]

        repos = {
            "user_repo": MongoUserRepository(db),
            "schedule_repo": MongoScheduleRepository(db),
            "assignment_repo": MongoAssignmentRepository(db),
            "attendance_repo": MongoAttendanceRepository(db),
            "note_repo": MongoNoteRepository(db),
        }
        for name, repo in repos.items():
            await repo.ensure_indexes()
            setattr(app.state, name, repo)   # repos available to the routes
        app.state.submission_files = GridFSFileStore(db, "submissionFiles")
        app.state.note_files = GridFSFileStore(db, "notesFiles")

        try:
            yield
        finally:
            app.state.login_limiter.reset()
            app.state.signup_limiter.reset()
            client.close()

    app = FastAPI(
        title="Academic Portal API",
        description="Schedules, assignments, attendance and shared notes for students, teachers and admins",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.login_limiter = _limiter("login")
    app.state.signup_limiter = _limiter("signup")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins, allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    install_error_handlers(app)

    app.include_router(health.router,     tags=["health"])
    app.include_router(auth.router,       prefix="/api/auth", tags=["auth"])
    app.include_router(schedule.router,   prefix="/api", tags=["schedule"])
    app.include_router(assignment.router, prefix="/api", tags=["assignments"])
    app.include_router(attendance.router, prefix="/api", tags=["attendance"])
    app.include_router(notes.router,      prefix="/api", tags=["notes"])
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
