from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from skillsync.database import get_db
from skillsync.dependencies import PageParams, get_current_principal, page_params
from skillsync.models.application import Application
from skillsync.schemas.application import ApplicationCreate, ApplicationResponse, ApplicationUpdate
from skillsync.schemas.common import Page
from skillsync.services import application_service
from skillsync.services.auth_service import Principal
from skillsync.services.notification_service import notifier
from skillsync.utils.pagination import total_pages

router = APIRouter(prefix="/applications", tags=["applications"])


def _application_to_response(application: Application) -> ApplicationResponse:
    return ApplicationResponse(
        id=application.id,
        job_id=application.job_id,
        developer_id=application.developer_id,
        cover_letter=application.cover_letter,
        proposed_rate=application.proposed_rate,
        estimated_duration=application.estimated_duration,
        status=application.status,
        portfolio=application.portfolio or [],
        attachments=application.attachments or [],
        created_at=application.created_at,
        updated_at=application.updated_at,
    )


@router.post("/job/{job_id}", response_model=ApplicationResponse, status_code=201)
async def submit_application(
    job_id: str,
    req: ApplicationCreate,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    outcome = await application_service.submit_application(db, principal, job_id, req)
    background_tasks.add_task(notifier.application_submitted, outcome.client, outcome.job, outcome.developer)
    return _application_to_response(outcome.application)


@router.get("/job/{job_id}", response_model=list[ApplicationResponse])
async def list_job_applications(
    job_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    applications = await application_service.list_job_applications(db, principal, job_id)
    return [_application_to_response(a) for a in applications]


@router.get("/my-applications", response_model=Page[ApplicationResponse])
async def my_applications(
    status: str | None = None,
    paging: PageParams = Depends(page_params),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    applications, total = await application_service.list_developer_applications(
        db, principal, page=paging.page, limit=paging.limit, status=status
    )
    return Page[ApplicationResponse](
        items=[_application_to_response(a) for a in applications],
        current_page=paging.page,
        total_pages=total_pages(total, paging.limit),
        total=total,
    )


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return _application_to_response(await application_service.view_application(db, principal, application_id))


@router.put("/{application_id}", response_model=ApplicationResponse)
async def update_application(
    application_id: str,
    req: ApplicationUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    application = await application_service.update_application(db, principal, application_id, req)
    return _application_to_response(application)


@router.put("/{application_id}/withdraw", response_model=ApplicationResponse)
async def withdraw_application(
    application_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    application = await application_service.withdraw_application(db, principal, application_id)
    return _application_to_response(application)
