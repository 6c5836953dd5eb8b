"""
Shared fixtures.

The app runs in-process over httpx's ASGITransport with an in-memory SQLite
store; Cloud Storage is a mock and audit logging stays local.
"""

from __future__ import annotations

from unittest.mock import Mock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from docsign.main import create_app
from docsign.services.database_service import DatabaseService
from docsign.services.logging_service import AuditLoggingService
from docsign.services.storage_service import StorageService

PASSWORD = "s3cret-pass"


@pytest.fixture
def db():
    service = DatabaseService("sqlite://")
    service.initialize()
    yield service
    service.close()


@pytest.fixture
def storage():
    service = Mock(spec=StorageService)
    service.upload_file.side_effect = (
        lambda file_obj, destination_blob_name, content_type=None: f"gs://test-bucket/{destination_blob_name}"
    )
    service.delete_file.return_value = True
    service.generate_signed_url.return_value = "https://storage.example/signed"
    return service


@pytest.fixture
def audit():
    return AuditLoggingService(project_id="test-project", enabled=False)


@pytest.fixture
def app(db, storage, audit):
    return create_app(database_service=db, storage_service=storage, audit_logger=audit)


@pytest_asyncio.fixture
async def http(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


async def register_and_login(client: AsyncClient, email: str = "ana@example.com", name: str = "Ana") -> dict:
    """Create an account and return the session response body."""
    response = await client.post("/api/register", json={"name": name, "email": email, "password": PASSWORD})
    assert response.status_code == 201, response.text
    response = await client.post("/api/auth/session", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return response.json()


def bearer(session: dict) -> dict:
    return {"Authorization": f"Bearer {session['token']}"}
