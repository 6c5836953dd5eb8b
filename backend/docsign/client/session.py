"""
Session provider client.

Exchanges credentials for a session token and ends sessions. The token is
kept opaque: it is only attached to later requests as a bearer header.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from docsign.client.navigation import Routes
from docsign.config import settings
from docsign.exceptions import RemoteError

logger = logging.getLogger(__name__)

CREDENTIALS_SIGNIN_ERROR = "CredentialsSignin"


@dataclass
class SignInResult:
    """Outcome of a credential exchange; ``error`` is None on success."""
    ok: bool
    status: int
    error: Optional[str] = None


def error_message(response: httpx.Response, fallback: str) -> str:
    """
    Pull a human readable message out of an error response.

    Looks at ``message`` then ``error`` in a JSON body and falls back when the
    body is not JSON or carries neither.
    """
    try:
        body: Any = response.json()
    except ValueError:
        logger.error(f"Failed to parse error response ({response.status_code})")
        return fallback

    if isinstance(body, dict):
        return body.get("message") or body.get("error") or fallback
    return fallback


def build_http_client(base_url: Optional[str] = None, **kwargs) -> httpx.AsyncClient:
    """Create the shared HTTP client for the API."""
    if settings.HTTP_TIMEOUT is not None:
        kwargs.setdefault("timeout", settings.HTTP_TIMEOUT)
    return httpx.AsyncClient(base_url=base_url or settings.API_BASE_URL, **kwargs)


class SessionProvider:
    """
    Credential-exchange and termination calls against the session endpoint.

    Attributes:
        http: HTTP client shared with the rest of the client layer
        token: Current session token, None when signed out
    """

    def __init__(self, http: httpx.AsyncClient):
        self.http = http
        self.token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    async def sign_in(self, email: str, password: str) -> SignInResult:
        """
        Exchange credentials for a session.

        Returns:
            SignInResult with ``error`` set when the provider refused

        Raises:
            RemoteError: On transport failure
        """
        try:
            response = await self.http.post(
                "/api/auth/session",
                json={"email": email, "password": password},
            )
        except httpx.HTTPError as e:
            raise RemoteError(f"Sign-in request failed: {e}") from e

        if not response.is_success:
            return SignInResult(
                ok=False,
                status=response.status_code,
                error=error_message(response, CREDENTIALS_SIGNIN_ERROR),
            )

        self.token = response.json()["token"]
        self.http.headers["Authorization"] = f"Bearer {self.token}"
        return SignInResult(ok=True, status=response.status_code)

    async def sign_out(self, callback_url: str = Routes.LOGIN) -> str:
        """
        End the session. The local token is dropped even if the call fails.

        Returns:
            The post-logout redirect target

        Raises:
            RemoteError: If the provider answered with an error or was unreachable
        """
        self.token = None
        self.http.headers.pop("Authorization", None)
        self.http.cookies.delete(settings.SESSION_COOKIE_NAME)

        try:
            response = await self.http.delete("/api/auth/session")
        except httpx.HTTPError as e:
            raise RemoteError(f"Sign-out request failed: {e}") from e

        if not response.is_success:
            raise RemoteError(error_message(response, "Sign-out failed"), response.status_code)

        return callback_url
