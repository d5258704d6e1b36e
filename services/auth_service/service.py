import structlog
from fastapi import HTTPException, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from services.session_service.service import TokenService
from shared.observability import ecomm_auth_attempts_total
from shared.security.passwords import hash_password, verify_password

from .models import User
from .repository import UserRepository
from .schemas import AuthResponse, PasswordChange, UserCreate, UserLogin, UserResponse

logger = structlog.get_logger(__name__)


class AuthService:

    @staticmethod
    async def register(db: AsyncSession, data: UserCreate) -> AuthResponse:
        existing = await UserRepository.get_by_email(db, data.email)
        if existing:
            ecomm_auth_attempts_total.labels(action="register", status="conflict").inc()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already registered",
            )

        user = User(
            email=data.email,
            password_hash=await run_in_threadpool(hash_password, data.password),
            name=data.name,
        )
        try:
            user = await UserRepository.create(db, user)
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            await db.rollback()
            ecomm_auth_attempts_total.labels(action="register", status="conflict").inc()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already registered",
            )

        user_out = UserResponse.model_validate(user)
        issued = await TokenService.issue(db, user)

        ecomm_auth_attempts_total.labels(action="register", status="success").inc()
        logger.info("user_registered", user_id=user_out.id)
        return AuthResponse(token=issued.token, user=user_out)

    @staticmethod
    async def login(db: AsyncSession, data: UserLogin) -> AuthResponse:
        user = await UserRepository.get_by_email(db, data.email)
        # bcrypt is CPU bound, keep it off the event loop
        matches = user is not None and await run_in_threadpool(
            verify_password, data.password, user.password_hash
        )
        if not matches:
            ecomm_auth_attempts_total.labels(action="login", status="failed").inc()
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password",
                headers={"WWW-Authenticate": "Bearer"},
            )

        user_out = UserResponse.model_validate(user)
        issued = await TokenService.issue(db, user)

        ecomm_auth_attempts_total.labels(action="login", status="success").inc()
        logger.info("user_logged_in", user_id=user_out.id)
        return AuthResponse(token=issued.token, user=user_out)

    @staticmethod
    async def logout(db: AsyncSession, token: str | None) -> bool:
        if not token:
            return False
        return await TokenService.revoke(db, token)

    @staticmethod
    async def change_password(db: AsyncSession, user: User, data: PasswordChange) -> None:
        user_id = user.id
        if not await run_in_threadpool(verify_password, data.current_password, user.password_hash):
            ecomm_auth_attempts_total.labels(action="change_password", status="failed").inc()
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Current password is incorrect",
            )

        new_hash = await run_in_threadpool(hash_password, data.new_password)
        await UserRepository.update_password_hash(db, user, new_hash)
        ecomm_auth_attempts_total.labels(action="change_password", status="success").inc()
        logger.info("password_changed", user_id=user_id)
