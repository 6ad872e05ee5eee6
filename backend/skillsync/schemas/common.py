from typing import Generic, Literal, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

SortOrder = Literal["asc", "desc"]


class Page(BaseModel, Generic[T]):
    items: list[T]
    current_page: int
    total_pages: int
    total: int


class MessageResponse(BaseModel):
    message: str


class AttachmentRef(BaseModel):
    filename: str
    url: str


def normalize_skills(skills: list[str] | None) -> list[str] | None:
    """Strip, de-duplicate and sort a skill list; ``None`` passes through."""
    if skills is None:
        return None
    cleaned = sorted({s.strip() for s in skills if s and s.strip()})
    for s in cleaned:
        if len(s) > 50:
            raise ValueError("Each skill must be at most 50 characters")
    return cleaned
