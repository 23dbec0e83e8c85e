# app/core/config.py
from typing import List, Literal, Tuple

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "your-secret-key"

NOTE_MIME_TYPES = [
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
]

SUBMISSION_MIME_TYPES = NOTE_MIME_TYPES + [
    "image/jpeg",
    "image/png",
    "image/gif",
    "application/zip",
    "application/x-zip-compressed",
]


class AttendanceBands(BaseModel):
    """Step table mapping an attendance rate to GPA and study hours.

    `gpa_steps` is checked in order with a strict `rate > threshold`;
    the first match wins, otherwise `gpa_floor` applies.
    """
    gpa_steps: List[Tuple[int, float]]
    gpa_floor: float
    hours_floor: float
    hours_divisor: float
    hours_cap: float = 20

    def gpa(self, rate: int) -> float:
        for threshold, value in self.gpa_steps:
            if rate > threshold:
                return value
        return self.gpa_floor

    def study_hours(self, rate: int) -> float:
        return min(self.hours_cap, max(self.hours_floor, rate / self.hours_divisor))


def _default_bands() -> dict:
    return {
        "student": AttendanceBands(
            gpa_steps=[(90, 4.0), (80, 3.5), (70, 3.0), (60, 2.5)],
            gpa_floor=2.0, hours_floor=5, hours_divisor=5,
        ),
        "teacher": AttendanceBands(
            gpa_steps=[(85, 3.6), (75, 3.4), (65, 3.2)],
            gpa_floor=3.0, hours_floor=8, hours_divisor=4,
        ),
        "admin": AttendanceBands(
            gpa_steps=[(88, 3.7), (78, 3.5), (68, 3.3)],
            gpa_floor=3.1, hours_floor=10, hours_divisor=4.5,
        ),
    }


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db_name: str = "academic_portal"

    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    allowed_origins: str = "http://localhost:3000,http://localhost:8080"
    port: int = 5000
    environment: str = "development"
    log_level: str = "INFO"

    current_semester: str = "Spring 2024"

    # empty assignedTo: open to every student (True) or to nobody (False)
    unassigned_assignment_open: bool = True
    resubmission_policy: Literal["reject", "replace"] = "reject"

    max_upload_bytes: int = 10 * 1024 * 1024
    note_mime_types: List[str] = NOTE_MIME_TYPES
    submission_mime_types: List[str] = SUBMISSION_MIME_TYPES

    rate_limit_attempts: int = 5
    rate_limit_window_seconds: int = 15 * 60

    attendance_bands: dict[str, AttendanceBands] = Field(default_factory=_default_bands)

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


settings = Settings()
