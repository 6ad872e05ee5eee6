import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from skillsync.constants import JOB_COMPLETED, RATING_MAX, RATING_MIN, RATING_PRECISION, ROLE_CLIENT
from skillsync.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    StateConflictError,
    ValidationFailedError,
)
from skillsync.models.rating import Rating
from skillsync.schemas.rating import RatingCreate, RatingUpdate
from skillsync.services.aggregates import mean_rating, recompute_developer_rating
from skillsync.services.auth_service import Principal, ensure_role
from skillsync.services.job_service import ensure_job_owner, get_job, get_user
from skillsync.utils.pagination import paginate
from skillsync.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)

CATEGORY_FIELDS = ("communication", "quality", "timeliness")


async def get_rating(db: AsyncSession, rating_id: str) -> Rating:
    rating = await db.get(Rating, rating_id, populate_existing=True)
    if rating is None:
        raise NotFoundError("Rating not found")
    return rating


def ensure_author(rating: Rating, principal: Principal):
    if rating.client_id != principal.id:
        raise ForbiddenError("Not authorized")


async def create_rating(db: AsyncSession, principal: Principal, req: RatingCreate) -> Rating:
    ensure_role(principal, ROLE_CLIENT)
    job = await get_job(db, req.job_id)
    ensure_job_owner(job, principal)
    if job.status != JOB_COMPLETED:
        raise StateConflictError("Can only rate completed jobs")
    if job.hired_developer_id != req.developer_id:
        raise ValidationFailedError("Developer was not hired for this job")

    existing = await db.scalar(select(Rating.id).where(Rating.job_id == req.job_id))
    if existing:
        raise ConflictError("Job already rated")

    categories = req.categories.model_dump() if req.categories else {}
    now = utc_now_iso()
    rating = Rating(
        id=str(uuid.uuid4()),
        job_id=req.job_id,
        client_id=principal.id,
        developer_id=req.developer_id,
        score=req.rating,
        review=req.review.strip() if req.review else None,
        communication=categories.get("communication"),
        quality=categories.get("quality"),
        timeliness=categories.get("timeliness"),
        created_at=now,
        updated_at=now,
    )
    db.add(rating)
    try:
        await db.flush()
        average, count = await recompute_developer_rating(db, req.developer_id)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Job already rated")
    except Exception:
        await db.rollback()
        raise

    logger.info("Developer %s rated %d for job %s (now %.2f over %d)",
                req.developer_id, req.rating, req.job_id, average, count)
    return rating


async def update_rating(db: AsyncSession, principal: Principal, rating_id: str, req: RatingUpdate) -> Rating:
    ensure_role(principal, ROLE_CLIENT)
    rating = await get_rating(db, rating_id)
    ensure_author(rating, principal)

    if req.rating is not None:
        rating.score = req.rating
    if "review" in req.model_fields_set:
        rating.review = req.review.strip() if req.review else None
    if req.categories is not None:
        # An explicit null clears a sub-score; omitted ones are left alone
        for field in CATEGORY_FIELDS:
            if field in req.categories.model_fields_set:
                setattr(rating, field, getattr(req.categories, field))
    rating.updated_at = utc_now_iso()

    try:
        await db.flush()
        await recompute_developer_rating(db, rating.developer_id)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return await get_rating(db, rating_id)


async def delete_rating(db: AsyncSession, principal: Principal, rating_id: str):
    ensure_role(principal, ROLE_CLIENT)
    rating = await get_rating(db, rating_id)
    ensure_author(rating, principal)
    developer_id = rating.developer_id

    try:
        await db.delete(rating)
        await db.flush()
        await recompute_developer_rating(db, developer_id)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info("Rating %s deleted", rating_id)


async def get_job_rating(db: AsyncSession, job_id: str) -> Rating:
    await get_job(db, job_id)
    rating = await db.scalar(select(Rating).where(Rating.job_id == job_id))
    if rating is None:
        raise NotFoundError("Rating not found")
    return rating


async def developer_rating_stats(db: AsyncSession, developer_id: str) -> dict:
    rows = (await db.execute(
        select(Rating.score, Rating.communication, Rating.quality, Rating.timeliness)
        .where(Rating.developer_id == developer_id)
    )).all()

    distribution = {score: 0 for score in range(RATING_MIN, RATING_MAX + 1)}
    for row in rows:
        distribution[row.score] += 1

    averages = {}
    for field in CATEGORY_FIELDS:
        values = [getattr(row, field) for row in rows if getattr(row, field) is not None]
        averages[field] = round(sum(values) / len(values), RATING_PRECISION) if values else None

    return {
        "average_rating": mean_rating([row.score for row in rows]),
        "total_ratings": len(rows),
        "distribution": distribution,
        "average_categories": averages,
    }


async def list_developer_ratings(
    db: AsyncSession, developer_id: str, *, page: int, limit: int
) -> tuple[list[Rating], int, dict]:
    await get_user(db, developer_id)
    query = (
        select(Rating)
        .where(Rating.developer_id == developer_id)
        .order_by(Rating.created_at.desc(), Rating.id)
    )
    ratings, total = await paginate(db, query, page, limit)
    return ratings, total, await developer_rating_stats(db, developer_id)


async def count_ratings(db: AsyncSession) -> tuple[int, float]:
    """Return the platform-wide rating count and mean score."""
    count, average = (await db.execute(select(func.count(Rating.id), func.avg(Rating.score)))).one()
    return count, round(average or 0.0, RATING_PRECISION)
