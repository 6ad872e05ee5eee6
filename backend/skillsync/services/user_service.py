import logging

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from skillsync.constants import JOB_COMPLETED, JOB_IN_PROGRESS, ROLE_ADMIN, ROLE_CLIENT
from skillsync.errors import ForbiddenError, StateConflictError
from skillsync.models.application import Application
from skillsync.models.job import Job, JobSkill
from skillsync.models.message import Message
from skillsync.models.rating import Rating
from skillsync.models.user import User, UserSkill
from skillsync.services.aggregates import recompute_developer_rating
from skillsync.services.auth_service import auth_service
from skillsync.services.job_service import get_user

logger = logging.getLogger(__name__)


async def _ensure_removable(db: AsyncSession, user: User):
    if user.role == ROLE_ADMIN:
        raise ForbiddenError("Cannot delete an admin account")

    active = await db.scalar(
        select(Job.id).where(
            Job.status == JOB_IN_PROGRESS,
            or_(Job.client_id == user.id, Job.hired_developer_id == user.id),
        ).limit(1)
    )
    if active is not None:
        raise StateConflictError("User has a job in progress")

    # A completed job must keep its hired developer
    delivered = await db.scalar(
        select(Job.id).where(Job.status == JOB_COMPLETED, Job.hired_developer_id == user.id).limit(1)
    )
    if delivered is not None:
        raise StateConflictError("User is the hired developer on a completed job")


async def delete_user(db: AsyncSession, user_id: str):
    """Delete a client or developer together with everything that hangs off them.

    A client takes their jobs with them, along with those jobs' applications,
    messages and ratings; every developer who lost a rating has their
    aggregate recomputed. A developer takes their applications, messages and
    received ratings. All of it happens in one transaction, and the user's
    tokens are revoked once it commits.
    """
    user = await get_user(db, user_id)
    await _ensure_removable(db, user)
    role = user.role

    try:
        if role == ROLE_CLIENT:
            job_ids = list((await db.scalars(select(Job.id).where(Job.client_id == user_id))).all())
            rated = set((await db.scalars(
                select(Rating.developer_id).where(Rating.job_id.in_(job_ids))
            )).all())
            for model in (Message, Rating, Application, JobSkill):
                await db.execute(
                    delete(model).where(model.job_id.in_(job_ids)).execution_options(synchronize_session=False)
                )
            result = await db.execute(
                delete(Job)
                .where(Job.client_id == user_id, Job.status != JOB_IN_PROGRESS)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != len(job_ids):
                raise StateConflictError("User has a job in progress")
            for developer_id in sorted(rated):
                await recompute_developer_rating(db, developer_id)
        else:
            await db.execute(
                delete(Message)
                .where(or_(Message.sender_id == user_id, Message.recipient_id == user_id))
                .execution_options(synchronize_session=False)
            )
            await db.execute(
                delete(Rating).where(Rating.developer_id == user_id).execution_options(synchronize_session=False)
            )
            await db.execute(
                delete(Application).where(Application.developer_id == user_id).execution_options(synchronize_session=False)
            )

        await db.execute(
            delete(UserSkill).where(UserSkill.user_id == user_id).execution_options(synchronize_session=False)
        )
        await db.execute(delete(User).where(User.id == user_id).execution_options(synchronize_session=False))
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    auth_service.revoke_user(user_id)
    logger.info("Deleted %s %s", role, user_id)
