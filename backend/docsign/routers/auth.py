"""
Registration and session endpoints.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from docsign.auth import create_session_token, get_current_user, hash_password, verify_password
from docsign.config import settings
from docsign.models.auth import LoginCredentials, RegisterData, SessionToken, User
from docsign.services.database_service import DuplicateEmailError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])

INVALID_CREDENTIALS = "Invalid email or password"


@router.post("/register", response_model=User, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterData, request: Request):
    """
    Create a user account.

    Raises:
        HTTPException: 409 if the email is already registered
    """
    database_service = request.app.state.database_service

    try:
        user = database_service.create_user(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password)
        )
    except DuplicateEmailError:
        logger.info("Registration rejected: email already registered")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A user with this email already exists"
        )

    request.app.state.audit_logger.log_user_registered(
        user_id=user.id,
        user_email=user.email,
        ip_address=request.client.host if request.client else None
    )

    return user


@router.post("/auth/session", response_model=SessionToken)
async def create_session(credentials: LoginCredentials, request: Request, response: Response):
    """
    Exchange credentials for a session token.

    The token is returned in the body and set as an HTTP-only cookie. Wrong
    email and wrong password produce the same generic 401.
    """
    database_service = request.app.state.database_service
    audit_logger = request.app.state.audit_logger
    ip_address = request.client.host if request.client else None

    user = database_service.get_user_by_email(credentials.email)

    if user is None or not verify_password(credentials.password, user.password_hash):
        audit_logger.log_authentication_failed(error=INVALID_CREDENTIALS, ip_address=ip_address)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS
        )

    token = create_session_token(user.id, user.email)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_TTL_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )

    audit_logger.log_user_login(user_id=user.id, user_email=user.email, ip_address=ip_address)

    return SessionToken(token=token, user=User.model_validate(user))


@router.get("/auth/session", response_model=User)
async def get_session(request: Request, user_id: str = Depends(get_current_user)):
    """
    Return the account behind the current session.
    """
    user = request.app.state.database_service.get_user(user_id)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session user no longer exists"
        )

    return user


@router.delete("/auth/session", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session():
    """
    End the session by clearing the session cookie.

    Tokens are stateless; clients drop their copy.
    """
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response
