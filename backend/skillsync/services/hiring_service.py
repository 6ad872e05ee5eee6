"""Hiring: the one operation that mutates a job and its applications together.

Everything happens in a single transaction. The job row is moved out of
``open`` with a conditional update, so when two hires race on the same job
exactly one of them sees an affected row; the other rolls back and reports a
state conflict. No partial outcome is ever committed.
"""
import logging
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from skillsync.constants import (
    APPLICATION_ACCEPTED,
    APPLICATION_PENDING,
    APPLICATION_REJECTED,
    JOB_IN_PROGRESS,
    JOB_OPEN,
    ROLE_CLIENT,
)
from skillsync.errors import NotFoundError, StateConflictError
from skillsync.models.application import Application
from skillsync.models.job import Job
from skillsync.models.user import User
from skillsync.services.application_service import get_application
from skillsync.services.auth_service import Principal, ensure_role
from skillsync.services.job_service import ensure_job_owner, ensure_transition, get_job, get_user
from skillsync.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)


@dataclass
class HireOutcome:
    job: Job
    application: Application
    rejected_count: int
    developer: User
    client: User


async def hire_developer(db: AsyncSession, principal: Principal, job_id: str, developer_id: str) -> HireOutcome:
    ensure_role(principal, ROLE_CLIENT)
    job = await get_job(db, job_id)
    ensure_job_owner(job, principal)
    if job.status != JOB_OPEN:
        raise StateConflictError("Job is not open")
    ensure_transition(job, JOB_IN_PROGRESS)

    application_id = await db.scalar(
        select(Application.id).where(
            Application.job_id == job_id,
            Application.developer_id == developer_id,
            Application.status == APPLICATION_PENDING,
        )
    )
    if application_id is None:
        raise NotFoundError("Application not found")

    now = utc_now_iso()
    try:
        result = await db.execute(
            update(Job)
            .where(Job.id == job_id, Job.status == JOB_OPEN)
            .values(status=JOB_IN_PROGRESS, hired_developer_id=developer_id, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise StateConflictError("Job is not open")

        result = await db.execute(
            update(Application)
            .where(Application.id == application_id, Application.status == APPLICATION_PENDING)
            .values(status=APPLICATION_ACCEPTED, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise StateConflictError("Application is no longer pending")

        result = await db.execute(
            update(Application)
            .where(Application.job_id == job_id, Application.id != application_id)
            .values(status=APPLICATION_REJECTED, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        rejected_count = result.rowcount
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Job %s: hired developer %s, rejected %d other application(s)", job_id, developer_id, rejected_count
    )
    return HireOutcome(
        job=await get_job(db, job_id),
        application=await get_application(db, application_id),
        rejected_count=rejected_count,
        developer=await get_user(db, developer_id),
        client=await get_user(db, principal.id),
    )
