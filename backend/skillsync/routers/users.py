from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from skillsync.constants import ROLE_ADMIN, ROLE_DEVELOPER
from skillsync.database import get_db
from skillsync.dependencies import PageParams, get_current_principal, page_params
from skillsync.models.user import User, UserSkill
from skillsync.schemas.common import Page, SortOrder
from skillsync.schemas.user import ProfileUpdate, UserResponse
from skillsync.services.auth_service import Principal
from skillsync.services.job_service import get_user
from skillsync.utils.pagination import order_clause, paginate, total_pages
from skillsync.utils.timestamps import utc_now_iso

router = APIRouter(prefix="/users", tags=["users"])

DEVELOPER_SORT_FIELDS = {
    "rating": User.rating,
    "hourly_rate": User.hourly_rate,
    "completed_projects": User.completed_projects,
    "created_at": User.created_at,
}


def user_to_response(user: User, include_contact: bool = False) -> UserResponse:
    # Contact details are shown only to the user themselves and to admins
    return UserResponse(
        id=user.id,
        email=user.email if include_contact else None,
        phone_number=user.phone_number if include_contact else None,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
        is_active=user.is_active,
        bio=user.bio,
        skills=user.skill_names,
        hourly_rate=user.hourly_rate,
        experience=user.experience,
        company=user.company,
        avatar_url=user.avatar_url,
        resume_url=user.resume_url,
        portfolio_url=user.portfolio_url,
        rating=user.rating,
        total_ratings=user.total_ratings,
        completed_projects=user.completed_projects,
        created_at=user.created_at,
    )


@router.get("/profile", response_model=UserResponse)
async def get_own_profile(
    principal: Principal = Depends(get_current_principal), db: AsyncSession = Depends(get_db)
):
    return user_to_response(await get_user(db, principal.id), include_contact=True)


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    req: ProfileUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    user = await get_user(db, principal.id)
    update_data = req.model_dump(exclude_unset=True)

    skills = update_data.pop("skills", None)
    if skills is not None:
        present = {s.skill: s for s in user.skills}
        for name, existing in present.items():
            if name not in skills:
                user.skills.remove(existing)
        user.skills.extend(UserSkill(skill=name) for name in skills if name not in present)
    for key, value in update_data.items():
        if key in ("first_name", "last_name") and not value:
            continue
        setattr(user, key, value.strip() if isinstance(value, str) else value)

    user.updated_at = utc_now_iso()
    await db.commit()
    return user_to_response(await get_user(db, principal.id), include_contact=True)


@router.get("/developers", response_model=Page[UserResponse])
async def search_developers(
    skills: list[str] | None = Query(None),
    experience: str | None = None,
    min_rate: float | None = Query(None, ge=0),
    max_rate: float | None = Query(None, ge=0),
    min_rating: float | None = Query(None, ge=0, le=5),
    search: str | None = None,
    sort_by: str = "rating",
    sort_order: SortOrder = "desc",
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
):
    query = select(User).where(User.role == ROLE_DEVELOPER, User.is_active.is_(True))
    if skills:
        query = query.where(User.id.in_(select(UserSkill.user_id).where(UserSkill.skill.in_(skills))))
    if experience:
        query = query.where(User.experience == experience)
    if min_rate is not None:
        query = query.where(User.hourly_rate >= min_rate)
    if max_rate is not None:
        query = query.where(User.hourly_rate <= max_rate)
    if min_rating is not None:
        query = query.where(User.rating >= min_rating)
    if search:
        query = query.where(or_(
            User.first_name.ilike(f"%{search}%"),
            User.last_name.ilike(f"%{search}%"),
            User.bio.ilike(f"%{search}%"),
        ))

    sort_column = DEVELOPER_SORT_FIELDS.get(sort_by, User.rating)
    query = query.order_by(order_clause(sort_column, sort_order), User.id)
    users, total = await paginate(db, query, paging.page, paging.limit)
    return Page[UserResponse](
        items=[user_to_response(u) for u in users],
        current_page=paging.page,
        total_pages=total_pages(total, paging.limit),
        total=total,
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_profile(
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    user = await get_user(db, user_id)
    return user_to_response(user, include_contact=principal.id == user.id or principal.role == ROLE_ADMIN)
