from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from skillsync.database import get_db
from skillsync.dependencies import bearer_token, get_current_principal
from skillsync.routers.users import user_to_response
from skillsync.schemas.auth import ChangePasswordRequest, LoginRequest, RegisterRequest, TokenResponse
from skillsync.schemas.common import MessageResponse
from skillsync.schemas.user import UserResponse
from skillsync.services.auth_service import Principal, auth_service
from skillsync.services.job_service import get_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(req: RegisterRequest, db: AsyncSession = Depends(get_db)):
    user = await auth_service.register(
        db,
        email=req.email,
        password=req.password,
        first_name=req.first_name,
        last_name=req.last_name,
        role=req.role,
    )
    token = auth_service.issue_token(user.id)
    return TokenResponse(**token, user=user_to_response(user, include_contact=True))


@router.post("/login", response_model=TokenResponse)
async def login(req: LoginRequest, db: AsyncSession = Depends(get_db)):
    user, token = await auth_service.login(db, req.email, req.password)
    return TokenResponse(**token, user=user_to_response(user, include_contact=True))


@router.post("/logout", response_model=MessageResponse)
async def logout(token: str = Depends(bearer_token)):
    auth_service.revoke_token(token)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserResponse)
async def me(principal: Principal = Depends(get_current_principal), db: AsyncSession = Depends(get_db)):
    return user_to_response(await get_user(db, principal.id), include_contact=True)


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    req: ChangePasswordRequest,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    await auth_service.change_password(db, principal, req.current_password, req.new_password)
    return MessageResponse(message="Password updated")


@router.post("/deactivate", response_model=MessageResponse)
async def deactivate(principal: Principal = Depends(get_current_principal), db: AsyncSession = Depends(get_db)):
    await auth_service.deactivate(db, principal)
    return MessageResponse(message="Account deactivated")
