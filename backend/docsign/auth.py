"""
Authentication and authorization helpers.

Sessions are HS256 JWTs carried either as a bearer token or in the session
cookie set by the session endpoint.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from docsign.config import settings


security = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash a plain password with a fresh bcrypt salt."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        # Malformed stored hash
        return False


def create_session_token(user_id: str, email: str, expires_minutes: Optional[int] = None) -> str:
    """
    Issue a signed session token.

    Args:
        user_id: Subject of the token
        email: Account email, copied into the claims
        expires_minutes: Lifetime override (defaults to SESSION_TTL_MINUTES)

    Returns:
        Encoded JWT
    """
    now = datetime.now(timezone.utc)
    ttl = expires_minutes if expires_minutes is not None else settings.SESSION_TTL_MINUTES
    payload = {
        "sub": user_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(minutes=ttl),
    }
    return jwt.encode(payload, settings.AUTH_SECRET, algorithm=settings.AUTH_ALGORITHM)


def decode_session_token(token: str) -> str:
    """
    Verify a session token and return the user ID.

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.AUTH_SECRET,
            algorithms=[settings.AUTH_ALGORITHM]
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Extract user ID from the 'sub' claim
    user_id: str = payload.get("sub")

    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing user ID",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user_id


async def verify_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """
    Verify the session token from the Authorization header or the session cookie.

    Args:
        request: Incoming request (for the cookie fallback)
        credentials: HTTP authorization credentials containing the bearer token

    Returns:
        User ID extracted from the token

    Raises:
        HTTPException: If no token is present, or it is invalid or expired
    """
    token = credentials.credentials if credentials else request.cookies.get(settings.SESSION_COOKIE_NAME)

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return decode_session_token(token)


async def get_current_user(user_id: str = Depends(verify_token)) -> str:
    """
    Get the current authenticated user.

    Args:
        user_id: User ID from verified token

    Returns:
        User ID
    """
    return user_id
