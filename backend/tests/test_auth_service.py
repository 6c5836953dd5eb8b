"""
Tests for the Auth Service.

Most tests drive the real app in-process; edge cases the app never produces
(405, non-JSON bodies, a sign-in that fails right after registration) use
httpx.MockTransport.
"""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from conftest import PASSWORD
from docsign.client.auth_service import AuthService
from docsign.client.navigation import Router, Routes
from docsign.client.notifications import Notifier, TOAST_MESSAGES
from docsign.client.session import SessionProvider
from docsign.config import settings
from docsign.exceptions import OperationInProgressError, RemoteError, SignInPendingError
from docsign.models.auth import LoginCredentials, RegisterData

MESSAGES = TOAST_MESSAGES["auth"]


def _service(http: httpx.AsyncClient) -> AuthService:
    return AuthService(SessionProvider(http), Router(initial=Routes.LOGIN), Notifier())


def _register_data(email: str = "ana@example.com") -> RegisterData:
    return RegisterData(name="Ana", email=email, password=PASSWORD, confirm_password=PASSWORD)


def _mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://testserver")


@pytest.mark.asyncio
async def test_register_signs_in_and_lands_on_documents(http):
    service = _service(http)

    result = await service.register(_register_data())

    assert result.ok
    assert service.session.is_authenticated
    assert service.router.current == Routes.DOCUMENTS
    assert service.notifier.last.kind == "success"
    assert service.notifier.last.message == MESSAGES["register_success"]
    assert service.is_loading is False


@pytest.mark.asyncio
async def test_register_existing_email_fails_without_duplicate(http, db):
    service = _service(http)
    await service.register(_register_data())
    router_before = list(service.router.history)

    result = await service.register(_register_data())

    assert not result.ok
    assert isinstance(result.error, RemoteError)
    assert result.error.status_code == 409
    assert service.notifier.last.kind == "error"
    assert service.notifier.last.message == "A user with this email already exists"
    assert service.router.history == router_before
    assert db.count_users("ana@example.com") == 1


@pytest.mark.asyncio
async def test_login_success_lands_on_root(http):
    await _service(http).register(_register_data())
    service = _service(http)

    result = await service.login(LoginCredentials(email="ana@example.com", password=PASSWORD))

    assert result.ok
    assert service.router.current == Routes.HOME
    assert service.notifier.last.message == MESSAGES["login_success"]


@pytest.mark.asyncio
async def test_login_wrong_password_fails_and_stays(http):
    await _service(http).register(_register_data())
    service = _service(http)

    result = await service.login(LoginCredentials(email="ana@example.com", password="wrong-pass"))

    assert not result.ok
    assert service.router.history == [Routes.LOGIN]
    assert service.notifier.last.kind == "error"
    assert service.notifier.last.message == MESSAGES["login_error"]
    assert not service.session.is_authenticated


@pytest.mark.asyncio
async def test_logout_goes_to_login(http):
    service = _service(http)
    await service.register(_register_data())

    result = await service.logout()

    assert result.ok
    assert service.router.current == Routes.LOGIN
    assert not service.session.is_authenticated
    assert service.notifier.last.message == MESSAGES["logout_success"]


@pytest.mark.asyncio
async def test_logout_failure_still_redirects():
    def handler(request):
        return httpx.Response(500, json={"message": "boom"})

    async with _mock_client(handler) as client:
        service = _service(client)
        result = await service.logout()

    assert not result.ok
    assert service.router.current == Routes.LOGIN
    assert service.notifier.last.message == MESSAGES["logout_error"]


@pytest.mark.asyncio
async def test_failed_logout_still_drops_the_session_cookie():
    async with _mock_client(lambda request: httpx.Response(500, json={"message": "boom"})) as client:
        client.cookies.set(settings.SESSION_COOKIE_NAME, "stale-token")
        client.headers["Authorization"] = "Bearer stale-token"
        service = _service(client)

        result = await service.logout()

        assert not result.ok
        assert client.cookies.get(settings.SESSION_COOKIE_NAME) is None
        assert "Authorization" not in client.headers
    assert not service.session.is_authenticated


@pytest.mark.asyncio
async def test_register_405_maps_to_unavailable_message():
    def handler(request):
        return httpx.Response(405, text="Method Not Allowed")

    async with _mock_client(handler) as client:
        service = _service(client)
        result = await service.register(_register_data())

    assert not result.ok
    assert result.error.message == MESSAGES["register_unavailable"]
    assert service.notifier.last.message == MESSAGES["register_unavailable"]


@pytest.mark.asyncio
async def test_register_unparseable_error_body_uses_generic_message():
    def handler(request):
        return httpx.Response(502, text="<html>Bad Gateway</html>")

    async with _mock_client(handler) as client:
        service = _service(client)
        result = await service.register(_register_data())

    assert result.error.message == MESSAGES["register_error"]


@pytest.mark.asyncio
async def test_register_uses_error_field_when_message_missing():
    def handler(request):
        return httpx.Response(400, json={"error": "Email domain not allowed"})

    async with _mock_client(handler) as client:
        result = await _service(client).register(_register_data())

    assert result.error.message == "Email domain not allowed"


@pytest.mark.asyncio
async def test_register_then_failed_sign_in_reports_pending():
    calls = []

    def handler(request):
        calls.append((request.method, request.url.path))
        if request.url.path == "/api/register":
            assert json.loads(request.content) == {"name": "Ana", "email": "ana@example.com", "password": PASSWORD}
            return httpx.Response(201, json={"id": "u1", "name": "Ana", "email": "ana@example.com"})
        return httpx.Response(401, json={"message": "Invalid email or password"})

    async with _mock_client(handler) as client:
        service = _service(client)
        result = await service.register(_register_data())

    assert not result.ok
    assert isinstance(result.error, SignInPendingError)
    assert result.error.email == "ana@example.com"
    assert service.notifier.last.message == MESSAGES["register_sign_in_pending"]
    assert service.router.history == [Routes.LOGIN]
    assert calls == [("POST", "/api/register"), ("POST", "/api/auth/session")]


@pytest.mark.asyncio
async def test_transport_failure_is_notified_not_raised():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _mock_client(handler) as client:
        service = _service(client)
        result = await service.login(LoginCredentials(email="ana@example.com", password=PASSWORD))

    assert not result.ok
    assert isinstance(result.error, RemoteError)
    assert service.notifier.last.message == MESSAGES["login_error"]
    assert service.is_loading is False


@pytest.mark.asyncio
async def test_overlapping_calls_are_rejected():
    release = asyncio.Event()
    requests = []

    async def handler(request):
        requests.append(request.url.path)
        await release.wait()
        return httpx.Response(200, json={"token": "t", "user": {}})

    async with _mock_client(handler) as client:
        service = _service(client)
        credentials = LoginCredentials(email="ana@example.com", password=PASSWORD)

        first = asyncio.ensure_future(service.login(credentials))
        await asyncio.sleep(0)
        assert service.is_loading

        second = await service.login(credentials)
        release.set()
        first_result = await first

    assert isinstance(second.error, OperationInProgressError)
    assert first_result.ok
    assert requests == ["/api/auth/session"]
    assert service.is_loading is False
