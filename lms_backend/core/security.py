"""Security dependencies for authenticated routes."""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..models.user import User
from .auth import auth_service
from .exceptions import AuthenticationError, InvalidTokenError
from .logging import SecurityLogger

# Security scheme; falls back to the session cookie
security = HTTPBearer(auto_error=False)


def extract_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    """Token from the Authorization header, else from the session cookie."""
    if credentials is not None and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return request.cookies.get(settings.auth.cookie_name) or None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user."""
    token = extract_token(request, credentials)
    if not token:
        SecurityLogger.log_unauthorized_access(
            path=request.url.path,
            method=request.method,
            ip_address=request.client.host if request.client else None,
            reason="missing_token"
        )
        raise AuthenticationError()

    try:
        user = await auth_service.authenticate_token(db, token)
    except InvalidTokenError as e:
        SecurityLogger.log_unauthorized_access(
            path=request.url.path,
            method=request.method,
            ip_address=request.client.host if request.client else None,
            reason=str(e)
        )
        raise AuthenticationError("Unauthorized: Invalid or expired token.") from e

    request.state.user_id = str(user.id)
    return user

