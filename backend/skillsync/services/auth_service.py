import logging
import time
import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from skillsync.config import settings
from skillsync.constants import ROLE_ADMIN, SELF_REGISTER_ROLES
from skillsync.errors import ConflictError, ForbiddenError, NotFoundError, UnauthenticatedError, ValidationFailedError
from skillsync.models.user import User
from skillsync.utils.security import generate_token, hash_password, password_needs_rehash, verify_password
from skillsync.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    id: str
    role: str


def ensure_role(principal: Principal, *roles: str) -> None:
    if principal.role not in roles:
        raise ForbiddenError(f"This action requires role: {' or '.join(roles)}")


class AuthService:
    def __init__(self):
        self._active_tokens: dict[str, tuple[str, float]] = {}  # token -> (user_id, expires_at)

    def _cleanup_expired(self):
        now = time.time()
        self._active_tokens = {
            t: entry for t, entry in self._active_tokens.items() if entry[1] > now
        }

    def issue_token(self, user_id: str) -> dict:
        self._cleanup_expired()
        token = generate_token()
        self._active_tokens[token] = (user_id, time.time() + settings.token_ttl_seconds)
        return {"token": token, "expires_in_seconds": settings.token_ttl_seconds}

    def revoke_token(self, token: str):
        self._active_tokens.pop(token, None)

    def revoke_user(self, user_id: str):
        self._active_tokens = {
            t: entry for t, entry in self._active_tokens.items() if entry[0] != user_id
        }

    def reset(self):
        self._active_tokens.clear()

    async def register(
        self, db: AsyncSession, *, email: str, password: str, first_name: str, last_name: str, role: str
    ) -> User:
        if role not in SELF_REGISTER_ROLES:
            raise ValidationFailedError(f"Cannot register with role: {role}")
        return await self._create_user(
            db, email=email, password=password, first_name=first_name, last_name=last_name, role=role
        )

    async def _create_user(
        self, db: AsyncSession, *, email: str, password: str, first_name: str, last_name: str, role: str
    ) -> User:
        email = email.strip().lower()
        existing = await db.scalar(select(User.id).where(User.email == email))
        if existing:
            raise ConflictError("User already exists")

        now = utc_now_iso()
        user = User(
            id=str(uuid.uuid4()),
            email=email,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
            is_active=True,
            rating=0.0,
            total_ratings=0,
            completed_projects=0,
            skills=[],
            created_at=now,
            updated_at=now,
        )
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("User already exists")
        logger.info("Registered %s %s", role, user.id)
        return user

    async def ensure_admin(self, db: AsyncSession, email: str, password: str) -> User:
        """Create the bootstrap admin account unless one with this email exists."""
        user = await db.scalar(select(User).where(User.email == email.strip().lower()))
        if user is not None:
            return user
        return await self._create_user(
            db, email=email, password=password, first_name="Platform", last_name="Admin", role=ROLE_ADMIN
        )

    async def login(self, db: AsyncSession, email: str, password: str) -> tuple[User, dict]:
        user = await db.scalar(select(User).where(User.email == email.strip().lower()))
        if user is None or not verify_password(user.password_hash, password):
            raise UnauthenticatedError("Invalid credentials")
        if not user.is_active:
            raise UnauthenticatedError("Account is deactivated")

        if password_needs_rehash(user.password_hash):
            user.password_hash = hash_password(password)
        user.last_login_at = utc_now_iso()
        await db.commit()
        return user, self.issue_token(user.id)

    async def authenticate(self, db: AsyncSession, token: str) -> User:
        self._cleanup_expired()
        entry = self._active_tokens.get(token)
        if entry is None:
            raise UnauthenticatedError("Invalid or expired token")
        user = await db.get(User, entry[0])
        if user is None or not user.is_active:
            self.revoke_token(token)
            raise UnauthenticatedError("Invalid or expired token")
        return user

    async def change_password(self, db: AsyncSession, principal: Principal, current_password: str, new_password: str):
        user = await db.get(User, principal.id)
        if user is None:
            raise NotFoundError("User not found")
        if not verify_password(user.password_hash, current_password):
            raise ValidationFailedError("Current password is incorrect")
        user.password_hash = hash_password(new_password)
        user.updated_at = utc_now_iso()
        await db.commit()

    async def deactivate(self, db: AsyncSession, principal: Principal):
        user = await db.get(User, principal.id)
        if user is None:
            raise NotFoundError("User not found")
        user.is_active = False
        user.updated_at = utc_now_iso()
        await db.commit()
        self.revoke_user(user.id)


auth_service = AuthService()
