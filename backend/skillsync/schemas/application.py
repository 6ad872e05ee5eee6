from pydantic import BaseModel, Field

from skillsync.schemas.common import AttachmentRef


class PortfolioItem(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    url: str | None = None
    description: str | None = Field(default=None, max_length=500)


class ApplicationCreate(BaseModel):
    cover_letter: str = Field(min_length=50, max_length=2000)
    proposed_rate: float = Field(ge=0)
    estimated_duration: str = Field(min_length=1, max_length=100)
    portfolio: list[PortfolioItem] = []
    attachments: list[AttachmentRef] = []


class ApplicationUpdate(BaseModel):
    cover_letter: str | None = Field(default=None, min_length=50, max_length=2000)
    proposed_rate: float | None = Field(default=None, ge=0)
    estimated_duration: str | None = Field(default=None, min_length=1, max_length=100)
    portfolio: list[PortfolioItem] | None = None
    attachments: list[AttachmentRef] | None = None


class ApplicationResponse(BaseModel):
    id: str
    job_id: str
    developer_id: str
    cover_letter: str
    proposed_rate: float
    estimated_duration: str
    status: str
    portfolio: list[PortfolioItem]
    attachments: list[AttachmentRef]
    created_at: str
    updated_at: str
