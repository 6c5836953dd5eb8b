"""
Auth Service: login, registration and logout as the user experiences them.

Each call toggles ``is_loading`` for its duration, notifies the user and
navigates. Errors are logged, notified and returned in an AuthResult rather
than raised. A call made while another one is still in flight is rejected
with OperationInProgressError.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

import httpx

from docsign.client.navigation import Router, Routes
from docsign.client.notifications import Notifier, TOAST_MESSAGES
from docsign.client.session import SessionProvider, error_message
from docsign.config import settings
from docsign.exceptions import OperationInProgressError, RemoteError, SignInPendingError
from docsign.models.auth import LoginCredentials, RegisterData

logger = logging.getLogger(__name__)

MESSAGES = TOAST_MESSAGES["auth"]


@dataclass
class AuthResult:
    """
    Outcome of an Auth Service call.

    Attributes:
        ok: True when the whole flow succeeded
        error: What went wrong; SignInPendingError means the account exists
            but the follow-up sign-in failed
    """
    ok: bool
    error: Optional[Exception] = None


class AuthService:
    def __init__(
        self,
        session: SessionProvider,
        router: Router,
        notifier: Notifier,
        login_redirect: Optional[str] = None,
    ):
        """
        Args:
            session: Session provider used for sign-in and sign-out
            router: Navigation target for post-auth redirects
            notifier: Where user feedback goes
            login_redirect: Landing route after login (defaults to LOGIN_REDIRECT)
        """
        self.session = session
        self.router = router
        self.notifier = notifier
        self.login_redirect = login_redirect or settings.LOGIN_REDIRECT
        self.is_loading = False

    @property
    def http(self) -> httpx.AsyncClient:
        return self.session.http

    @asynccontextmanager
    async def _busy(self, operation: str):
        if self.is_loading:
            raise OperationInProgressError(f"{operation} rejected: another auth request is in flight")
        self.is_loading = True
        try:
            yield
        finally:
            self.is_loading = False

    async def login(self, credentials: LoginCredentials) -> AuthResult:
        """
        Sign in and land on the login redirect route.

        On a provider error the user stays on the current view.
        """
        try:
            async with self._busy("login"):
                result = await self.session.sign_in(credentials.email, credentials.password)

                if result.error:
                    logger.error(f"Login error: {result.error}")
                    self.notifier.error(MESSAGES["login_error"])
                    return AuthResult(ok=False, error=RemoteError(result.error, result.status))

                self.notifier.success(MESSAGES["login_success"])
                self.router.push(self.login_redirect)
                return AuthResult(ok=True)

        except OperationInProgressError as e:
            logger.warning(str(e))
            return AuthResult(ok=False, error=e)
        except RemoteError as e:
            logger.error(f"Login error: {e}")
            self.notifier.error(MESSAGES["login_error"])
            return AuthResult(ok=False, error=e)

    async def _create_account(self, data: RegisterData) -> None:
        try:
            response = await self.http.post(
                "/api/register",
                json={"name": data.name, "email": data.email, "password": data.password},
            )
        except httpx.HTTPError as e:
            raise RemoteError(f"Registration request failed: {e}") from e

        logger.debug(f"Registration response status: {response.status_code}")

        if response.status_code == 405:
            raise RemoteError(MESSAGES["register_unavailable"], 405)

        if not response.is_success:
            raise RemoteError(
                error_message(response, MESSAGES["register_error"]),
                response.status_code,
            )

    async def register(self, data: RegisterData) -> AuthResult:
        """
        Create an account, sign in with the same credentials, land on /documents.

        If the account is created but the sign-in fails, the result carries a
        SignInPendingError and no navigation happens.
        """
        try:
            async with self._busy("register"):
                await self._create_account(data)

                logger.info("Registration successful, attempting to sign in...")
                result = await self.session.sign_in(data.email, data.password)

                if result.error:
                    logger.error(f"Post-registration sign in error: {result.error}")
                    raise SignInPendingError(MESSAGES["register_sign_in_pending"], data.email)

                self.notifier.success(MESSAGES["register_success"])
                self.router.push(Routes.DOCUMENTS)
                return AuthResult(ok=True)

        except OperationInProgressError as e:
            logger.warning(str(e))
            return AuthResult(ok=False, error=e)
        except (RemoteError, SignInPendingError) as e:
            logger.error(f"Registration error: {e}")
            self.notifier.error(e.message)
            return AuthResult(ok=False, error=e)

    async def logout(self) -> AuthResult:
        """
        End the session and go to the login route.

        The local session is dropped even when the provider call fails, so the
        redirect happens either way; only the notification differs.
        """
        try:
            async with self._busy("logout"):
                try:
                    target = await self.session.sign_out(callback_url=Routes.LOGIN)
                except RemoteError as e:
                    logger.error(f"Logout error: {e}")
                    self.notifier.error(MESSAGES["logout_error"])
                    self.router.push(Routes.LOGIN)
                    return AuthResult(ok=False, error=e)

                self.notifier.success(MESSAGES["logout_success"])
                self.router.push(target)
                return AuthResult(ok=True)

        except OperationInProgressError as e:
            logger.warning(str(e))
            return AuthResult(ok=False, error=e)
