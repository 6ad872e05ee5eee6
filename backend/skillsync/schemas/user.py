from typing import Literal

from pydantic import BaseModel, Field, field_validator

from skillsync.schemas.common import normalize_skills


class UserResponse(BaseModel):
    id: str
    email: str | None
    phone_number: str | None = None
    first_name: str
    last_name: str
    role: str
    is_active: bool
    bio: str | None
    skills: list[str] = []
    hourly_rate: float | None
    experience: str | None
    company: str | None
    avatar_url: str | None
    resume_url: str | None
    portfolio_url: str | None
    rating: float
    total_ratings: int
    completed_projects: int
    created_at: str


class ProfileUpdate(BaseModel):
    first_name: str | None = Field(default=None, min_length=2, max_length=50)
    last_name: str | None = Field(default=None, min_length=2, max_length=50)
    bio: str | None = Field(default=None, max_length=1000)
    skills: list[str] | None = None
    hourly_rate: float | None = Field(default=None, ge=0)
    experience: Literal["beginner", "intermediate", "expert"] | None = None
    company: str | None = Field(default=None, max_length=100)
    phone_number: str | None = None
    avatar_url: str | None = None
    resume_url: str | None = None
    portfolio_url: str | None = None

    @field_validator("skills")
    @classmethod
    def clean_skills(cls, v: list[str] | None) -> list[str] | None:
        return normalize_skills(v)
