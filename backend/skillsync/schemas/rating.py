from pydantic import BaseModel, Field

from skillsync.schemas.common import Page


class RatingCategories(BaseModel):
    communication: int | None = Field(default=None, ge=1, le=5)
    quality: int | None = Field(default=None, ge=1, le=5)
    timeliness: int | None = Field(default=None, ge=1, le=5)


class RatingCreate(BaseModel):
    job_id: str
    developer_id: str
    rating: int = Field(ge=1, le=5)
    review: str | None = Field(default=None, max_length=1000)
    categories: RatingCategories | None = None


class RatingUpdate(BaseModel):
    rating: int | None = Field(default=None, ge=1, le=5)
    review: str | None = Field(default=None, max_length=1000)
    categories: RatingCategories | None = None


class RatingResponse(BaseModel):
    id: str
    job_id: str
    client_id: str
    developer_id: str
    rating: int
    review: str | None
    categories: RatingCategories
    created_at: str
    updated_at: str


class RatingStats(BaseModel):
    average_rating: float
    total_ratings: int
    distribution: dict[int, int]
    average_categories: dict[str, float | None]


class DeveloperRatingsPage(Page[RatingResponse]):
    stats: RatingStats
