import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from skillsync.constants import (
    APPLICATION_PENDING,
    APPLICATION_WITHDRAWN,
    JOB_OPEN,
    ROLE_CLIENT,
    ROLE_DEVELOPER,
)
from skillsync.errors import ConflictError, ForbiddenError, NotFoundError, StateConflictError
from skillsync.models.application import Application
from skillsync.models.job import Job
from skillsync.models.user import User
from skillsync.schemas.application import ApplicationCreate, ApplicationUpdate
from skillsync.services.auth_service import Principal, ensure_role
from skillsync.services.job_service import ensure_job_owner, get_job, get_user
from skillsync.utils.pagination import paginate
from skillsync.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)


@dataclass
class SubmissionOutcome:
    application: Application
    job: Job
    client: User
    developer: User


async def get_application(db: AsyncSession, application_id: str) -> Application:
    application = await db.get(Application, application_id, populate_existing=True)
    if application is None:
        raise NotFoundError("Application not found")
    return application


def ensure_applicant(application: Application, principal: Principal):
    if application.developer_id != principal.id:
        raise ForbiddenError("Not authorized")


async def submit_application(
    db: AsyncSession, principal: Principal, job_id: str, req: ApplicationCreate
) -> SubmissionOutcome:
    ensure_role(principal, ROLE_DEVELOPER)
    job = await get_job(db, job_id)
    if job.status != JOB_OPEN:
        raise StateConflictError("Job is not open for applications")

    existing = await db.scalar(
        select(Application.id).where(Application.job_id == job_id, Application.developer_id == principal.id)
    )
    if existing:
        raise ConflictError("You have already applied to this job")

    now = utc_now_iso()
    application = Application(
        id=str(uuid.uuid4()),
        job_id=job_id,
        developer_id=principal.id,
        cover_letter=req.cover_letter.strip(),
        proposed_rate=req.proposed_rate,
        estimated_duration=req.estimated_duration.strip(),
        status=APPLICATION_PENDING,
        portfolio=[p.model_dump() for p in req.portfolio],
        attachments=[a.model_dump() for a in req.attachments],
        created_at=now,
        updated_at=now,
    )
    db.add(application)
    try:
        await db.flush()
        # Re-read the job status inside the write transaction so a hire that
        # committed after the first check cannot leave a pending application behind
        status = await db.scalar(select(Job.status).where(Job.id == job_id))
        if status != JOB_OPEN:
            raise StateConflictError("Job is not open for applications")
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("You have already applied to this job")
    except Exception:
        await db.rollback()
        raise

    logger.info("Developer %s applied to job %s", principal.id, job_id)
    return SubmissionOutcome(
        application=application,
        job=job,
        client=await get_user(db, job.client_id),
        developer=await get_user(db, principal.id),
    )


async def update_application(
    db: AsyncSession, principal: Principal, application_id: str, req: ApplicationUpdate
) -> Application:
    ensure_role(principal, ROLE_DEVELOPER)
    application = await get_application(db, application_id)
    ensure_applicant(application, principal)
    if application.status != APPLICATION_PENDING:
        raise StateConflictError("Cannot update application that is not pending")

    update_data = {
        k: v.strip() if isinstance(v, str) else v
        for k, v in req.model_dump(exclude_unset=True).items()
        if v is not None
    }
    update_data["updated_at"] = utc_now_iso()
    result = await db.execute(
        update(Application)
        .where(Application.id == application_id, Application.status == APPLICATION_PENDING)
        .values(**update_data)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        raise StateConflictError("Cannot update application that is not pending")
    await db.commit()
    return await get_application(db, application_id)


async def withdraw_application(db: AsyncSession, principal: Principal, application_id: str) -> Application:
    ensure_role(principal, ROLE_DEVELOPER)
    application = await get_application(db, application_id)
    ensure_applicant(application, principal)
    if application.status != APPLICATION_PENDING:
        raise StateConflictError("Cannot withdraw application that is not pending")

    result = await db.execute(
        update(Application)
        .where(Application.id == application_id, Application.status == APPLICATION_PENDING)
        .values(status=APPLICATION_WITHDRAWN, updated_at=utc_now_iso())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        raise StateConflictError("Cannot withdraw application that is not pending")
    await db.commit()
    logger.info("Application %s withdrawn", application_id)
    return await get_application(db, application_id)


async def view_application(db: AsyncSession, principal: Principal, application_id: str) -> Application:
    application = await get_application(db, application_id)
    if application.developer_id == principal.id:
        return application
    job = await get_job(db, application.job_id)
    ensure_job_owner(job, principal)
    return application


async def list_job_applications(db: AsyncSession, principal: Principal, job_id: str) -> list[Application]:
    ensure_role(principal, ROLE_CLIENT)
    job = await get_job(db, job_id)
    ensure_job_owner(job, principal)
    result = await db.scalars(
        select(Application)
        .where(Application.job_id == job_id)
        .order_by(Application.created_at.desc(), Application.id)
    )
    return list(result.all())


async def list_developer_applications(
    db: AsyncSession, principal: Principal, *, page: int, limit: int, status: str | None = None
) -> tuple[list[Application], int]:
    ensure_role(principal, ROLE_DEVELOPER)
    query = select(Application).where(Application.developer_id == principal.id)
    if status:
        query = query.where(Application.status == status)
    query = query.order_by(Application.created_at.desc(), Application.id)
    return await paginate(db, query, page, limit)
