from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from skillsync.database import get_db
from skillsync.dependencies import PageParams, get_current_principal, page_params
from skillsync.models.rating import Rating
from skillsync.schemas.rating import (
    DeveloperRatingsPage,
    RatingCategories,
    RatingCreate,
    RatingResponse,
    RatingStats,
    RatingUpdate,
)
from skillsync.services import rating_service
from skillsync.services.auth_service import Principal
from skillsync.utils.pagination import total_pages

router = APIRouter(prefix="/ratings", tags=["ratings"])


def _rating_to_response(rating: Rating) -> RatingResponse:
    return RatingResponse(
        id=rating.id,
        job_id=rating.job_id,
        client_id=rating.client_id,
        developer_id=rating.developer_id,
        rating=rating.score,
        review=rating.review,
        categories=RatingCategories(
            communication=rating.communication,
            quality=rating.quality,
            timeliness=rating.timeliness,
        ),
        created_at=rating.created_at,
        updated_at=rating.updated_at,
    )


@router.post("", response_model=RatingResponse, status_code=201)
async def create_rating(
    req: RatingCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return _rating_to_response(await rating_service.create_rating(db, principal, req))


@router.get("/developer/{developer_id}", response_model=DeveloperRatingsPage)
async def developer_ratings(
    developer_id: str,
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
):
    ratings, total, stats = await rating_service.list_developer_ratings(
        db, developer_id, page=paging.page, limit=paging.limit
    )
    return DeveloperRatingsPage(
        items=[_rating_to_response(r) for r in ratings],
        current_page=paging.page,
        total_pages=total_pages(total, paging.limit),
        total=total,
        stats=RatingStats(**stats),
    )


@router.get("/job/{job_id}", response_model=RatingResponse)
async def job_rating(job_id: str, db: AsyncSession = Depends(get_db)):
    return _rating_to_response(await rating_service.get_job_rating(db, job_id))


@router.put("/{rating_id}", response_model=RatingResponse)
async def update_rating(
    rating_id: str,
    req: RatingUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return _rating_to_response(await rating_service.update_rating(db, principal, rating_id, req))


@router.delete("/{rating_id}", status_code=204)
async def delete_rating(
    rating_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    await rating_service.delete_rating(db, principal, rating_id)
    return Response(status_code=204)
