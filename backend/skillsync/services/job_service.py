import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from skillsync.constants import (
    DELETABLE_JOB_STATUSES,
    JOB_CANCELLED,
    JOB_COMPLETED,
    JOB_IN_PROGRESS,
    JOB_OPEN,
    ROLE_ADMIN,
    ROLE_CLIENT,
    VALID_JOB_TRANSITIONS,
)
from skillsync.errors import ForbiddenError, NotFoundError, StateConflictError, ValidationFailedError
from skillsync.models.application import Application
from skillsync.models.job import Job, JobSkill
from skillsync.models.message import Message
from skillsync.models.rating import Rating
from skillsync.models.user import User
from skillsync.schemas.job import JobCreate, JobUpdate
from skillsync.services.aggregates import recompute_developer_rating
from skillsync.services.auth_service import Principal, ensure_role
from skillsync.utils.pagination import order_clause, paginate
from skillsync.utils.timestamps import format_iso, to_utc, utc_now, utc_now_iso

logger = logging.getLogger(__name__)

JOB_SORT_FIELDS = {
    "created_at": Job.created_at,
    "budget": Job.budget,
    "deadline": Job.deadline,
    "title": Job.title,
}


@dataclass
class CompletionOutcome:
    job: Job
    developer: User
    client: User


async def get_job(db: AsyncSession, job_id: str) -> Job:
    result = await db.execute(
        select(Job).where(Job.id == job_id).execution_options(populate_existing=True)
    )
    job = result.scalar_one_or_none()
    if job is None:
        raise NotFoundError("Job not found")
    return job


async def get_user(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id, populate_existing=True)
    if user is None:
        raise NotFoundError("User not found")
    return user


def ensure_job_owner(job: Job, principal: Principal):
    if job.client_id != principal.id:
        raise ForbiddenError("Not authorized")


def ensure_transition(job: Job, target: str):
    if target not in VALID_JOB_TRANSITIONS[job.status]:
        raise StateConflictError(f"Cannot move job from {job.status} to {target}")


async def application_ids(db: AsyncSession, job_id: str) -> list[str]:
    # Derived from the application records; the job never stores this list
    result = await db.scalars(
        select(Application.id)
        .where(Application.job_id == job_id)
        .order_by(Application.created_at.asc(), Application.id.asc())
    )
    return list(result.all())


def _require_future(deadline: datetime) -> str:
    if to_utc(deadline) <= utc_now():
        raise ValidationFailedError("Deadline must be in the future")
    return format_iso(deadline)


def _sync_skills(job: Job, names: list[str]):
    wanted = set(names)
    for existing in list(job.skills):
        if existing.skill not in wanted:
            job.skills.remove(existing)
    present = {s.skill for s in job.skills}
    for name in sorted(wanted - present):
        job.skills.append(JobSkill(skill=name))


async def create_job(db: AsyncSession, principal: Principal, req: JobCreate) -> Job:
    ensure_role(principal, ROLE_CLIENT)
    deadline = _require_future(req.deadline)

    now = utc_now_iso()
    job = Job(
        id=str(uuid.uuid4()),
        title=req.title.strip(),
        description=req.description.strip(),
        budget=req.budget,
        budget_type=req.budget_type,
        deadline=deadline,
        experience_level=req.experience_level,
        category=req.category,
        estimated_duration=req.estimated_duration,
        status=JOB_OPEN,
        client_id=principal.id,
        hired_developer_id=None,
        is_urgent=req.is_urgent,
        payment_released=False,
        created_at=now,
        updated_at=now,
        skills=[JobSkill(skill=s) for s in req.required_skills],
    )
    db.add(job)
    await db.commit()
    logger.info("Job %s created by client %s", job.id, principal.id)
    return await get_job(db, job.id)


async def list_open_jobs(
    db: AsyncSession,
    *,
    page: int,
    limit: int,
    category: str | None = None,
    experience_level: str | None = None,
    budget_type: str | None = None,
    min_budget: float | None = None,
    max_budget: float | None = None,
    skills: list[str] | None = None,
    search: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> tuple[list[Job], int]:
    query = select(Job).where(Job.status == JOB_OPEN)

    if category:
        query = query.where(Job.category == category)
    if experience_level:
        query = query.where(Job.experience_level == experience_level)
    if budget_type:
        query = query.where(Job.budget_type == budget_type)
    if min_budget is not None:
        query = query.where(Job.budget >= min_budget)
    if max_budget is not None:
        query = query.where(Job.budget <= max_budget)
    if skills:
        query = query.where(Job.id.in_(select(JobSkill.job_id).where(JobSkill.skill.in_(skills))))
    if search:
        query = query.where(
            or_(Job.title.ilike(f"%{search}%"), Job.description.ilike(f"%{search}%"))
        )

    sort_column = JOB_SORT_FIELDS.get(sort_by, Job.created_at)
    query = query.order_by(order_clause(sort_column, sort_order), Job.id)
    return await paginate(db, query, page, limit)


async def list_jobs(
    db: AsyncSession, *, page: int, limit: int, status: str | None = None, client_id: str | None = None
) -> tuple[list[Job], int]:
    query = select(Job)
    if client_id:
        query = query.where(Job.client_id == client_id)
    if status:
        query = query.where(Job.status == status)
    query = query.order_by(Job.created_at.desc(), Job.id)
    return await paginate(db, query, page, limit)


async def list_client_jobs(
    db: AsyncSession, principal: Principal, *, page: int, limit: int, status: str | None = None
) -> tuple[list[Job], int]:
    ensure_role(principal, ROLE_CLIENT)
    return await list_jobs(db, page=page, limit=limit, status=status, client_id=principal.id)


async def update_job(db: AsyncSession, principal: Principal, job_id: str, req: JobUpdate) -> Job:
    ensure_role(principal, ROLE_CLIENT)
    job = await get_job(db, job_id)
    ensure_job_owner(job, principal)
    if job.status != JOB_OPEN:
        raise StateConflictError("Cannot update job that is not open")

    update_data = req.model_dump(exclude_unset=True)
    for key in [k for k, v in update_data.items() if v is None]:
        # Required columns cannot be cleared; only estimated_duration is nullable
        if key != "estimated_duration":
            update_data.pop(key)
    if "deadline" in update_data:
        update_data["deadline"] = _require_future(req.deadline)
    skills = update_data.pop("required_skills", None)
    if skills is not None:
        if not skills:
            raise ValidationFailedError("At least one skill is required")
        _sync_skills(job, skills)

    now = utc_now_iso()
    update_data["updated_at"] = now
    result = await db.execute(
        update(Job)
        .where(Job.id == job_id, Job.status == JOB_OPEN)
        .values(**update_data)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        raise StateConflictError("Cannot update job that is not open")
    await db.commit()
    return await get_job(db, job_id)


async def cancel_job(db: AsyncSession, principal: Principal, job_id: str) -> Job:
    ensure_role(principal, ROLE_CLIENT)
    job = await get_job(db, job_id)
    ensure_job_owner(job, principal)
    ensure_transition(job, JOB_CANCELLED)

    result = await db.execute(
        update(Job)
        .where(Job.id == job_id, Job.status == JOB_OPEN)
        .values(status=JOB_CANCELLED, updated_at=utc_now_iso())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        raise StateConflictError("Job is not open")
    await db.commit()
    logger.info("Job %s cancelled", job_id)
    return await get_job(db, job_id)


async def complete_job(db: AsyncSession, principal: Principal, job_id: str) -> CompletionOutcome:
    ensure_role(principal, ROLE_CLIENT)
    job = await get_job(db, job_id)
    ensure_job_owner(job, principal)
    if job.status != JOB_IN_PROGRESS:
        raise StateConflictError("Job is not in progress")
    developer_id = job.hired_developer_id

    try:
        result = await db.execute(
            update(Job)
            .where(Job.id == job_id, Job.status == JOB_IN_PROGRESS)
            .values(status=JOB_COMPLETED, updated_at=utc_now_iso())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise StateConflictError("Job is not in progress")
        # The guarded update above succeeds once per job, so this runs once per completion
        await db.execute(
            update(User)
            .where(User.id == developer_id)
            .values(completed_projects=User.completed_projects + 1)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Job %s completed by client %s", job_id, principal.id)
    return CompletionOutcome(
        job=await get_job(db, job_id),
        developer=await get_user(db, developer_id),
        client=await get_user(db, principal.id),
    )


async def release_payment(db: AsyncSession, principal: Principal, job_id: str) -> Job:
    ensure_role(principal, ROLE_CLIENT)
    job = await get_job(db, job_id)
    ensure_job_owner(job, principal)
    if job.status != JOB_COMPLETED:
        raise StateConflictError("Payment can only be released for completed jobs")
    if job.payment_released:
        raise StateConflictError("Payment already released")

    result = await db.execute(
        update(Job)
        .where(Job.id == job_id, Job.status == JOB_COMPLETED, Job.payment_released.is_(False))
        .values(payment_released=True, updated_at=utc_now_iso())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        raise StateConflictError("Payment already released")
    await db.commit()
    return await get_job(db, job_id)


async def delete_job(db: AsyncSession, principal: Principal, job_id: str):
    """Delete a job with its applications, messages and rating.

    Admins may delete any job; clients only their own. Either way a job with
    work underway cannot be deleted.
    """
    ensure_role(principal, ROLE_CLIENT, ROLE_ADMIN)
    job = await get_job(db, job_id)
    if principal.role != ROLE_ADMIN:
        ensure_job_owner(job, principal)
    if job.status not in DELETABLE_JOB_STATUSES:
        raise StateConflictError("Cannot delete job that is in progress")

    rated_developer_id = await db.scalar(select(Rating.developer_id).where(Rating.job_id == job_id))
    try:
        await db.execute(delete(Message).where(Message.job_id == job_id).execution_options(synchronize_session=False))
        await db.execute(delete(Rating).where(Rating.job_id == job_id).execution_options(synchronize_session=False))
        await db.execute(delete(Application).where(Application.job_id == job_id).execution_options(synchronize_session=False))
        await db.execute(delete(JobSkill).where(JobSkill.job_id == job_id).execution_options(synchronize_session=False))
        result = await db.execute(
            delete(Job)
            .where(Job.id == job_id, Job.status.in_(DELETABLE_JOB_STATUSES))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise StateConflictError("Cannot delete job that is in progress")
        if rated_developer_id:
            await recompute_developer_rating(db, rated_developer_id)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info("Job %s deleted by %s %s", job_id, principal.role, principal.id)
