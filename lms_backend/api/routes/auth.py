"""Authentication routes."""
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...database import get_db
from ...schemas.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    RegisterRequest,
    ResetPasswordRequest,
    SignInRequest,
    SignInResponse,
    UserEnvelope,
    UserResponse,
)
from ...schemas.common import SuccessResponse
from ...core.auth import auth_service
from ...core.security import get_current_user
from ...models.user import User
from ..middleware import client_ip, forgot_password_limiter

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": settings.auth.cookie_samesite,
    }


@router.post("/register", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db)
):
    """Register a new user."""
    user = await auth_service.register(db, payload)
    return UserEnvelope(
        message="User registered successfully!",
        user=UserResponse.model_validate(user),
    )


@router.post("/signin", response_model=SignInResponse)
async def sign_in(
    payload: SignInRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    """Sign in and set the access token cookie."""
    user, token = await auth_service.sign_in(db, payload, ip_address=client_ip(request))

    response.set_cookie(
        key=settings.auth.cookie_name,
        value=token,
        max_age=auth_service.tokens.expires_in,
        **_cookie_options()
    )

    return SignInResponse(
        message="User signed in successfully!",
        user=UserResponse.model_validate(user),
        token=token,
        expires_in=auth_service.tokens.expires_in,
    )


@router.post("/signout", response_model=SuccessResponse)
async def sign_out(response: Response):
    """Clear the access token cookie."""
    response.delete_cookie(key=settings.auth.cookie_name, **_cookie_options())
    return SuccessResponse(message="User signed out successfully!")


@router.post(
    "/forgot-password",
    response_model=SuccessResponse,
    dependencies=[Depends(forgot_password_limiter)]
)
async def forgot_password(
    payload: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db)
):
    """Email a password reset link."""
    await auth_service.forgot_password(db, payload)
    return SuccessResponse(
        message="If an account exists for this email, a password reset link has been sent!"
    )


@router.post("/reset-password", response_model=SuccessResponse)
async def reset_password(
    payload: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db)
):
    """Set a new password using a reset token."""
    await auth_service.reset_password(db, payload)
    return SuccessResponse(message="Password reset successfully!")


@router.put("/change-password", response_model=SuccessResponse)
async def change_password(
    payload: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Change password; tokens issued before the change stop working."""
    await auth_service.change_password(db, current_user.id, payload)
    return SuccessResponse(message="Password changed successfully!")


@router.get("/me", response_model=UserEnvelope)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get current user information."""
    return UserEnvelope(
        message="Successfully fetched user",
        user=UserResponse.model_validate(current_user),
    )
