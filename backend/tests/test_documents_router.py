"""
Tests for the /api/documents endpoints.
"""

from __future__ import annotations

import pytest

from conftest import bearer, register_and_login
from docsign.exceptions import StoreError
from docsign.models.document import DocumentStatus
from docsign.storage import document_store


@pytest.mark.asyncio
async def test_list_requires_session(http):
    response = await http.get("/api/documents")

    assert response.status_code == 401
    assert response.json()["message"] == "Not authenticated"


@pytest.mark.asyncio
async def test_list_returns_only_callers_documents_in_camel_case(http, db):
    session = await register_and_login(http)
    user_id = session["user"]["id"]
    document_store.create_document(db, name="a.pdf", file_key="k1", user_id=user_id, size=2097152)
    document_store.create_document(db, name="b.pdf", file_key="k2", user_id="someone-else")

    response = await http.get("/api/documents", headers=bearer(session))

    assert response.status_code == 200
    body = response.json()
    assert len(body) == 1
    assert body[0]["name"] == "a.pdf"
    assert body[0]["fileKey"] == "k1"
    assert body[0]["status"] == "PENDING"
    assert "createdAt" in body[0] and "updatedAt" in body[0]


@pytest.mark.asyncio
async def test_upload_stores_file_and_creates_pending_document(http, storage, audit):
    session = await register_and_login(http)

    response = await http.post(
        "/api/documents",
        headers=bearer(session),
        files={"file": ("contract final.pdf", b"%PDF-1.4 test", "application/pdf")},
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["name"] == "contract_final.pdf"
    assert body["size"] == len(b"%PDF-1.4 test")
    assert body["mimeType"] == "application/pdf"
    assert body["fileKey"].startswith(f"gs://test-bucket/users/{session['user']['id']}/")
    storage.upload_file.assert_called_once()


@pytest.mark.asyncio
async def test_upload_rejects_disallowed_type(http, storage):
    session = await register_and_login(http)

    response = await http.post(
        "/api/documents",
        headers=bearer(session),
        files={"file": ("script.exe", b"MZ", "application/octet-stream")},
    )

    assert response.status_code == 400
    assert "File type not allowed" in response.json()["message"]
    storage.upload_file.assert_not_called()


@pytest.mark.asyncio
async def test_upload_rejects_empty_file(http, storage):
    session = await register_and_login(http)

    response = await http.post(
        "/api/documents",
        headers=bearer(session),
        files={"file": ("empty.pdf", b"", "application/pdf")},
    )

    assert response.status_code == 413
    assert "empty" in response.json()["message"]
    storage.upload_file.assert_not_called()


@pytest.mark.asyncio
async def test_get_patch_sign_flow(http, db):
    session = await register_and_login(http)
    doc = document_store.create_document(db, name="a.pdf", file_key="k1", user_id=session["user"]["id"])
    headers = bearer(session)

    response = await http.patch(f"/api/documents/{doc.id}", json={"name": "renamed.pdf"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["name"] == "renamed.pdf"
    assert response.json()["id"] == doc.id

    response = await http.post(f"/api/documents/{doc.id}/sign", json={"signatureImg": "data:image/png;base64,AA"}, headers=headers)
    assert response.status_code == 200
    signed = response.json()
    assert signed["status"] == "SIGNED"
    assert signed["signature"]["documentId"] == doc.id
    assert signed["signature"]["signedAt"] is not None

    response = await http.get(f"/api/documents/{doc.id}", headers=headers)
    assert response.json()["signature"]["signatureImg"] == "data:image/png;base64,AA"

    response = await http.post(f"/api/documents/{doc.id}/sign", json={"signatureImg": "again"}, headers=headers)
    assert response.status_code == 409
    assert response.json()["message"] == "Document is already signed"


@pytest.mark.asyncio
async def test_reject_pending_document(http, db):
    session = await register_and_login(http)
    doc = document_store.create_document(db, name="a.pdf", file_key="k1", user_id=session["user"]["id"])

    response = await http.post(f"/api/documents/{doc.id}/reject", headers=bearer(session))

    assert response.status_code == 200
    assert response.json()["status"] == "REJECTED"


@pytest.mark.asyncio
async def test_delete_is_permanent_and_removes_stored_file(http, db, storage):
    session = await register_and_login(http)
    doc = document_store.create_document(db, name="a.pdf", file_key="gs://test-bucket/k1", user_id=session["user"]["id"])
    headers = bearer(session)

    response = await http.delete(f"/api/documents/{doc.id}", headers=headers)
    assert response.status_code == 204
    storage.delete_file.assert_called_once_with("gs://test-bucket/k1")

    response = await http.get(f"/api/documents/{doc.id}", headers=headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Document not found"


@pytest.mark.asyncio
async def test_other_users_document_is_forbidden(http, db):
    owner = await register_and_login(http, email="owner@example.com")
    intruder = await register_and_login(http, email="intruder@example.com")
    doc = document_store.create_document(db, name="a.pdf", file_key="k1", user_id=owner["user"]["id"])

    response = await http.get(f"/api/documents/{doc.id}", headers=bearer(intruder))
    assert response.status_code == 403

    response = await http.delete(f"/api/documents/{doc.id}", headers=bearer(intruder))
    assert response.status_code == 403
    assert document_store.get_document(db, doc.id).id == doc.id


@pytest.mark.asyncio
async def test_download_returns_signed_url(http, db, storage):
    session = await register_and_login(http)
    doc = document_store.create_document(db, name="a.pdf", file_key="gs://test-bucket/k1", user_id=session["user"]["id"])

    response = await http.get(f"/api/documents/{doc.id}/download", headers=bearer(session))

    assert response.status_code == 200
    assert response.json()["downloadUrl"] == "https://storage.example/signed"
    storage.generate_signed_url.assert_called_once_with("gs://test-bucket/k1")


@pytest.mark.asyncio
async def test_patch_cannot_repoint_file_or_change_status(http, db, storage):
    alice = await register_and_login(http, email="alice@example.com", name="Alice")
    bob = await register_and_login(http, email="bob@example.com", name="Bob")
    alice_key = "gs://test-bucket/users/alice/secret.pdf"
    document_store.create_document(db, name="secret.pdf", file_key=alice_key, user_id=alice["user"]["id"])
    own_key = "gs://test-bucket/users/bob/own.pdf"
    doc = document_store.create_document(db, name="own.pdf", file_key=own_key, user_id=bob["user"]["id"])
    headers = bearer(bob)

    response = await http.patch(f"/api/documents/{doc.id}", json={"fileKey": alice_key}, headers=headers)
    assert response.status_code == 422
    assert response.json()["message"].startswith("fileKey")

    for status_value in ("SIGNED", "PENDING"):
        response = await http.patch(f"/api/documents/{doc.id}", json={"status": status_value}, headers=headers)
        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"

    stored = document_store.get_document(db, doc.id)
    assert stored.file_key == own_key
    assert stored.status == DocumentStatus.PENDING
    assert stored.signature is None

    await http.get(f"/api/documents/{doc.id}/download", headers=headers)
    storage.generate_signed_url.assert_called_once_with(own_key)
    await http.delete(f"/api/documents/{doc.id}", headers=headers)
    storage.delete_file.assert_called_once_with(own_key)


@pytest.mark.asyncio
async def test_patch_null_name_is_a_validation_error(http, db):
    session = await register_and_login(http)
    doc = document_store.create_document(db, name="a.pdf", file_key="k1", user_id=session["user"]["id"])

    response = await http.patch(f"/api/documents/{doc.id}", json={"name": None}, headers=bearer(session))

    assert response.status_code == 422
    assert response.json()["message"].startswith("name")
    assert "SQL" not in response.text
    assert document_store.get_document(db, doc.id).name == "a.pdf"


@pytest.mark.asyncio
async def test_patch_mime_type(http, db):
    session = await register_and_login(http)
    doc = document_store.create_document(db, name="a.pdf", file_key="k1", user_id=session["user"]["id"])

    response = await http.patch(
        f"/api/documents/{doc.id}", json={"mimeType": "application/pdf"}, headers=bearer(session)
    )

    assert response.status_code == 200
    assert response.json()["mimeType"] == "application/pdf"
    assert response.json()["name"] == "a.pdf"


@pytest.mark.asyncio
async def test_store_failure_hides_driver_detail(http, monkeypatch):
    session = await register_and_login(http)

    def _fail(*args, **kwargs):
        raise StoreError("Failed to list documents: connection refused", "list_documents")

    monkeypatch.setattr(document_store, "list_documents", _fail)

    response = await http.get("/api/documents", headers=bearer(session))

    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error", "error": "STORE_ERROR"}
    assert "connection refused" not in response.text
