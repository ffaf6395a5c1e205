# ============================================================================
# FILE: courtside/api/dependencies.py
# Bearer token authentication for booking routes
# ============================================================================
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
from datetime import timedelta
from jose import JWTError, jwt

from courtside.config.database import get_db
from courtside.config.settings import settings
from courtside.models.user import User
from courtside.utils.time_utils import utcnow

jwt_security = HTTPBearer(
    scheme_name="JWT Bearer Token",
    description="Access token issued at login"
)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign an access token. ``data['sub']`` carries the user id as a string.

    Tokens expire after JWT_ACCESS_TOKEN_EXPIRE_MINUTES unless
    ``expires_delta`` says otherwise.
    """
    issued_at = utcnow()
    lifetime = expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)

    claims = dict(data, iat=issued_at, exp=issued_at + lifetime, type="access")
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def verify_access_token(token: str) -> dict:
    """Decode an access token, raising 401 when it is invalid or expired"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise _unauthorized(f"Could not validate credentials: {e}")

    if payload.get("type") != "access":
        raise _unauthorized("Invalid token type")

    return payload


async def get_current_user(
        credentials: HTTPAuthorizationCredentials = Depends(jwt_security),
        db: Session = Depends(get_db)
) -> User:
    """Resolve the bearer token to a stored user"""
    payload = verify_access_token(credentials.credentials)

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise _unauthorized("Invalid user ID in token")

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise _unauthorized("User not found")

    return user


async def get_current_active_user(
        current_user: User = Depends(get_current_user)
) -> User:
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user account"
        )

    return current_user
