from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from skillsync.schemas.common import normalize_skills

BudgetType = Literal["fixed", "hourly"]
ExperienceLevel = Literal["beginner", "intermediate", "expert"]
Category = Literal[
    "web-development",
    "mobile-development",
    "desktop-development",
    "api-development",
    "database",
    "devops",
    "other",
]
EstimatedDuration = Literal[
    "less-than-1-week",
    "1-2-weeks",
    "2-4-weeks",
    "1-2-months",
    "more-than-2-months",
]


class JobCreate(BaseModel):
    title: str = Field(min_length=5, max_length=100)
    description: str = Field(min_length=50, max_length=5000)
    required_skills: list[str] = Field(min_length=1)
    budget: float = Field(ge=0)
    budget_type: BudgetType
    deadline: datetime
    experience_level: ExperienceLevel
    category: Category
    estimated_duration: EstimatedDuration | None = None
    is_urgent: bool = False

    @field_validator("required_skills")
    @classmethod
    def clean_skills(cls, v: list[str]) -> list[str]:
        cleaned = normalize_skills(v)
        if not cleaned:
            raise ValueError("At least one skill is required")
        return cleaned


class JobUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=5, max_length=100)
    description: str | None = Field(default=None, min_length=50, max_length=5000)
    required_skills: list[str] | None = None
    budget: float | None = Field(default=None, ge=0)
    budget_type: BudgetType | None = None
    deadline: datetime | None = None
    experience_level: ExperienceLevel | None = None
    category: Category | None = None
    estimated_duration: EstimatedDuration | None = None
    is_urgent: bool | None = None

    @field_validator("required_skills")
    @classmethod
    def clean_skills(cls, v: list[str] | None) -> list[str] | None:
        return normalize_skills(v)


class HireRequest(BaseModel):
    job_id: str
    developer_id: str


class JobResponse(BaseModel):
    id: str
    title: str
    description: str
    required_skills: list[str]
    budget: float
    budget_type: str
    deadline: str
    experience_level: str
    category: str
    estimated_duration: str | None
    status: str
    client_id: str
    hired_developer_id: str | None
    application_ids: list[str] = []
    is_urgent: bool
    payment_released: bool
    created_at: str
    updated_at: str
