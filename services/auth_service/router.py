from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config import settings
from shared.config.database import get_db
from shared.security import get_token_from_request, limiter
from shared.security.jwt_handler import ACCESS_TOKEN_EXPIRE

from .dependencies import get_current_user
from .models import User
from .schemas import (
    AuthResponse,
    MessageResponse,
    PasswordChange,
    UserCreate,
    UserLogin,
    UserResponse,
)
from .service import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=int(ACCESS_TOKEN_EXPIRE.total_seconds()),
        path="/",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account",
)
async def register(payload: UserCreate, response: Response, db: AsyncSession = Depends(get_db)):
    result = await AuthService.register(db, payload)
    _set_auth_cookie(response, result.token)
    return result


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Authenticate and receive a JWT access token",
)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    payload: UserLogin,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    result = await AuthService.login(db, payload)
    _set_auth_cookie(response, result.token)
    return result


@router.post("/logout", response_model=MessageResponse, summary="Log out and clear the auth cookie")
async def logout(request: Request, response: Response, db: AsyncSession = Depends(get_db)):
    await AuthService.logout(db, get_token_from_request(request))
    response.delete_cookie(settings.AUTH_COOKIE_NAME, path="/")
    return MessageResponse(message="Logged out")


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get the current authenticated user's profile",
)
async def get_me(user: User = Depends(get_current_user)):
    return user


@router.post(
    "/password",
    response_model=MessageResponse,
    summary="Change the current user's password",
)
async def change_password(
    payload: PasswordChange,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await AuthService.change_password(db, user, payload)
    return MessageResponse(message="Password updated successfully")
