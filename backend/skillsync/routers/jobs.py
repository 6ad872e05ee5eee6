from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from skillsync.database import get_db
from skillsync.dependencies import PageParams, get_current_principal, page_params
from skillsync.models.job import Job
from skillsync.schemas.common import MessageResponse, Page, SortOrder
from skillsync.schemas.job import BudgetType, Category, ExperienceLevel, HireRequest, JobCreate, JobResponse, JobUpdate
from skillsync.services import hiring_service, job_service
from skillsync.services.auth_service import Principal
from skillsync.services.notification_service import notifier
from skillsync.utils.pagination import total_pages

router = APIRouter(prefix="/jobs", tags=["jobs"])


async def job_to_response(job: Job, db: AsyncSession) -> JobResponse:
    return JobResponse(
        id=job.id,
        title=job.title,
        description=job.description,
        required_skills=job.skill_names,
        budget=job.budget,
        budget_type=job.budget_type,
        deadline=job.deadline,
        experience_level=job.experience_level,
        category=job.category,
        estimated_duration=job.estimated_duration,
        status=job.status,
        client_id=job.client_id,
        hired_developer_id=job.hired_developer_id,
        application_ids=await job_service.application_ids(db, job.id),
        is_urgent=job.is_urgent,
        payment_released=job.payment_released,
        created_at=job.created_at,
        updated_at=job.updated_at,
    )


async def jobs_page(jobs: list[Job], total: int, paging: PageParams, db: AsyncSession) -> Page[JobResponse]:
    return Page[JobResponse](
        items=[await job_to_response(j, db) for j in jobs],
        current_page=paging.page,
        total_pages=total_pages(total, paging.limit),
        total=total,
    )


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(
    req: JobCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    job = await job_service.create_job(db, principal, req)
    return await job_to_response(job, db)


@router.get("", response_model=Page[JobResponse])
async def list_jobs(
    category: Category | None = None,
    experience_level: ExperienceLevel | None = None,
    budget_type: BudgetType | None = None,
    min_budget: float | None = Query(None, ge=0),
    max_budget: float | None = Query(None, ge=0),
    skills: list[str] | None = Query(None),
    search: str | None = None,
    sort_by: str = "created_at",
    sort_order: SortOrder = "desc",
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
):
    jobs, total = await job_service.list_open_jobs(
        db,
        page=paging.page,
        limit=paging.limit,
        category=category,
        experience_level=experience_level,
        budget_type=budget_type,
        min_budget=min_budget,
        max_budget=max_budget,
        skills=skills,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return await jobs_page(jobs, total, paging, db)


@router.get("/my-jobs", response_model=Page[JobResponse])
async def my_jobs(
    status: str | None = None,
    paging: PageParams = Depends(page_params),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    jobs, total = await job_service.list_client_jobs(
        db, principal, page=paging.page, limit=paging.limit, status=status
    )
    return await jobs_page(jobs, total, paging, db)


@router.post("/hire", response_model=JobResponse)
async def hire_developer(
    req: HireRequest,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    outcome = await hiring_service.hire_developer(db, principal, req.job_id, req.developer_id)
    background_tasks.add_task(notifier.developer_hired, outcome.developer, outcome.job, outcome.client)
    return await job_to_response(outcome.job, db)


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: str, db: AsyncSession = Depends(get_db)):
    return await job_to_response(await job_service.get_job(db, job_id), db)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: str,
    req: JobUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    job = await job_service.update_job(db, principal, job_id, req)
    return await job_to_response(job, db)


@router.delete("/{job_id}", status_code=204)
async def delete_job(
    job_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    await job_service.delete_job(db, principal, job_id)
    return Response(status_code=204)


@router.post("/{job_id}/cancel", response_model=JobResponse)
async def cancel_job(
    job_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    job = await job_service.cancel_job(db, principal, job_id)
    return await job_to_response(job, db)


@router.post("/{job_id}/complete", response_model=JobResponse)
async def complete_job(
    job_id: str,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    outcome = await job_service.complete_job(db, principal, job_id)
    background_tasks.add_task(notifier.job_completed, outcome.developer, outcome.job, outcome.client)
    return await job_to_response(outcome.job, db)


@router.post("/{job_id}/release-payment", response_model=MessageResponse)
async def release_payment(
    job_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    await job_service.release_payment(db, principal, job_id)
    return MessageResponse(message="Payment released")
