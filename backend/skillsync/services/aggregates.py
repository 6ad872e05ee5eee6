from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from skillsync.constants import RATING_PRECISION
from skillsync.models.rating import Rating
from skillsync.models.user import User


def mean_rating(scores: list[int]) -> float:
    if not scores:
        return 0.0
    return round(sum(scores) / len(scores), RATING_PRECISION)


async def recompute_developer_rating(db: AsyncSession, developer_id: str) -> tuple[float, int]:
    """Rewrite a developer's rating and rating count from every rating they hold.

    Runs inside the caller's transaction and does not commit. Two concurrent
    recomputes for the same developer may race; the last writer wins.
    """
    scores = list((await db.scalars(select(Rating.score).where(Rating.developer_id == developer_id))).all())
    average = mean_rating(scores)
    await db.execute(
        update(User)
        .where(User.id == developer_id)
        .values(rating=average, total_ratings=len(scores))
        .execution_options(synchronize_session=False)
    )
    return average, len(scores)
