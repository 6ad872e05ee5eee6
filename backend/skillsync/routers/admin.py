import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from skillsync.constants import APPLICATION_STATUSES, JOB_STATUSES, ROLE_ADMIN, ROLES
from skillsync.database import get_db
from skillsync.dependencies import PageParams, get_current_principal, page_params
from skillsync.errors import ForbiddenError
from skillsync.models.application import Application
from skillsync.models.job import Job
from skillsync.models.user import User
from skillsync.routers.jobs import jobs_page
from skillsync.routers.users import user_to_response
from skillsync.schemas.common import Page
from skillsync.schemas.job import JobResponse
from skillsync.schemas.user import UserResponse
from skillsync.services import job_service, rating_service, user_service
from skillsync.services.auth_service import Principal, auth_service, ensure_role
from skillsync.utils.pagination import paginate, total_pages
from skillsync.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)


async def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    ensure_role(principal, ROLE_ADMIN)
    return principal


router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


@router.get("/users", response_model=Page[UserResponse])
async def list_users(
    role: str | None = None,
    is_active: bool | None = None,
    search: str | None = None,
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
):
    query = select(User)
    if role:
        query = query.where(User.role == role)
    if is_active is not None:
        query = query.where(User.is_active.is_(is_active))
    if search:
        query = query.where(or_(
            User.first_name.ilike(f"%{search}%"),
            User.last_name.ilike(f"%{search}%"),
            User.email.ilike(f"%{search}%"),
        ))
    query = query.order_by(User.created_at.desc(), User.id)
    users, total = await paginate(db, query, paging.page, paging.limit)
    return Page[UserResponse](
        items=[user_to_response(u, include_contact=True) for u in users],
        current_page=paging.page,
        total_pages=total_pages(total, paging.limit),
        total=total,
    )


@router.put("/users/{user_id}/toggle-status", response_model=UserResponse)
async def toggle_user_status(user_id: str, db: AsyncSession = Depends(get_db)):
    user = await job_service.get_user(db, user_id)
    if user.role == ROLE_ADMIN:
        raise ForbiddenError("Cannot change the status of an admin account")

    user.is_active = not user.is_active
    user.updated_at = utc_now_iso()
    await db.commit()
    if not user.is_active:
        auth_service.revoke_user(user.id)
    logger.info("User %s %s", user.id, "activated" if user.is_active else "deactivated")
    return user_to_response(user, include_contact=True)


@router.delete("/users/{user_id}", status_code=204)
async def delete_user(user_id: str, db: AsyncSession = Depends(get_db)):
    await user_service.delete_user(db, user_id)
    return Response(status_code=204)


@router.get("/jobs", response_model=Page[JobResponse])
async def list_all_jobs(
    status: str | None = None,
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
):
    jobs, total = await job_service.list_jobs(db, page=paging.page, limit=paging.limit, status=status)
    return await jobs_page(jobs, total, paging, db)


@router.delete("/jobs/{job_id}", status_code=204)
async def delete_job(
    job_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    await job_service.delete_job(db, principal, job_id)
    return Response(status_code=204)


@router.get("/statistics")
async def statistics(db: AsyncSession = Depends(get_db)):
    users_by_role = dict.fromkeys(ROLES, 0)
    for role, n in (await db.execute(select(User.role, func.count(User.id)).group_by(User.role))).all():
        users_by_role[role] = n

    jobs_by_status = dict.fromkeys(JOB_STATUSES, 0)
    for status, n in (await db.execute(select(Job.status, func.count(Job.id)).group_by(Job.status))).all():
        jobs_by_status[status] = n

    applications_by_status = dict.fromkeys(APPLICATION_STATUSES, 0)
    rows = await db.execute(select(Application.status, func.count(Application.id)).group_by(Application.status))
    for status, n in rows.all():
        applications_by_status[status] = n

    rating_count, average_rating = await rating_service.count_ratings(db)

    return {
        "users": {"total": sum(users_by_role.values()), "by_role": users_by_role},
        "jobs": {"total": sum(jobs_by_status.values()), "by_status": jobs_by_status},
        "applications": {"total": sum(applications_by_status.values()), "by_status": applications_by_status},
        "ratings": {"total": rating_count, "average": average_rating},
    }

