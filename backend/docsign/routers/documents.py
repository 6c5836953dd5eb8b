"""
Document management endpoints.
"""

import logging
import uuid
from io import BytesIO
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Request, Response, UploadFile, status

from docsign.auth import get_current_user
from docsign.models.document import Document, DocumentPatch, DocumentWithSignature, SignRequest
from docsign.storage import document_store
from docsign.utils.validators import sanitize_filename, validate_upload_file

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["documents"])


def _client_ip(request: Request):
    return request.client.host if request.client else None


def _load_owned_document(request: Request, document_id: str, user_id: str) -> DocumentWithSignature:
    """
    Fetch a document and check that the caller owns it.

    Raises:
        NotFoundError: If the document does not exist
        HTTPException: 403 if it belongs to another user
    """
    document = document_store.get_document(request.app.state.database_service, document_id)

    if document.user_id != user_id:
        request.app.state.audit_logger.log_unauthorized_access(
            user_id=user_id,
            document_id=document_id,
            reason=f"User attempted to access another user's document (owner: {document.user_id})",
            ip_address=_client_ip(request)
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to access this document"
        )

    return document


@router.get("", response_model=List[Document])
async def list_documents(request: Request, user_id: str = Depends(get_current_user)):
    """
    Get all documents for the current user, newest first.
    """
    return document_store.list_documents(request.app.state.database_service, user_id=user_id)


@router.post("", response_model=Document, status_code=status.HTTP_201_CREATED)
async def upload_document(
    request: Request,
    file: UploadFile = File(...),
    user_id: str = Depends(get_current_user)
):
    """
    Upload a document file and register it in PENDING status.

    Args:
        request: FastAPI request object (to access app state)
        file: File to upload
        user_id: Current authenticated user ID

    Returns:
        The created document

    Raises:
        HTTPException: If validation or the upload fails
    """
    file_size = await validate_upload_file(file)
    safe_filename = sanitize_filename(file.filename)
    doc_id = str(uuid.uuid4())

    try:
        file_content = await file.read()
        file_key = request.app.state.storage_service.upload_file(
            file_obj=BytesIO(file_content),
            destination_blob_name=f"users/{user_id}/{doc_id}_{safe_filename}",
            content_type=file.content_type
        )
    except Exception as e:
        logger.error(f"Failed to upload file for document {doc_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to upload file: {str(e)}"
        )

    document = document_store.create_document(
        request.app.state.database_service,
        name=safe_filename,
        file_key=file_key,
        user_id=user_id,
        size=file_size,
        mime_type=file.content_type,
        doc_id=doc_id,
    )

    request.app.state.audit_logger.log_document_uploaded(
        user_id=user_id,
        document_id=doc_id,
        filename=safe_filename,
        file_size=file_size,
        ip_address=_client_ip(request)
    )

    return document


@router.get("/{document_id}", response_model=DocumentWithSignature)
async def get_document(
    document_id: str,
    request: Request,
    user_id: str = Depends(get_current_user)
):
    """
    Get a specific document by ID, with its signature if signed.
    """
    return _load_owned_document(request, document_id, user_id)


@router.patch("/{document_id}", response_model=DocumentWithSignature)
async def update_document(
    document_id: str,
    updates: DocumentPatch,
    request: Request,
    user_id: str = Depends(get_current_user)
):
    """
    Rename a document or correct its MIME type.
    """
    _load_owned_document(request, document_id, user_id)
    return document_store.update_document(
        request.app.state.database_service,
        document_id,
        updates.model_dump(exclude_unset=True),
    )


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: str,
    request: Request,
    user_id: str = Depends(get_current_user)
):
    """
    Permanently delete a document, its signature, and its stored file.
    """
    _load_owned_document(request, document_id, user_id)
    deleted = document_store.delete_document(request.app.state.database_service, document_id)

    if deleted.file_key.startswith("gs://"):
        try:
            request.app.state.storage_service.delete_file(deleted.file_key)
        except Exception as e:
            # The record is gone either way; an orphaned blob is only logged
            logger.warning(f"Failed to delete stored file {deleted.file_key}: {e}")

    request.app.state.audit_logger.log_document_deleted(
        user_id=user_id,
        document_id=document_id,
        file_key=deleted.file_key,
        ip_address=_client_ip(request)
    )

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{document_id}/sign", response_model=DocumentWithSignature)
async def sign_document(
    document_id: str,
    body: SignRequest,
    request: Request,
    user_id: str = Depends(get_current_user)
):
    """
    Sign a document with the caller's signature image.
    """
    _load_owned_document(request, document_id, user_id)
    document = document_store.sign_document(
        request.app.state.database_service,
        document_id,
        user_id=user_id,
        signature_img=body.signature_img,
    )

    request.app.state.audit_logger.log_document_signed(
        user_id=user_id,
        document_id=document_id,
        ip_address=_client_ip(request)
    )

    return document


@router.post("/{document_id}/reject", response_model=DocumentWithSignature)
async def reject_document(
    document_id: str,
    request: Request,
    user_id: str = Depends(get_current_user)
):
    """
    Reject a pending document.
    """
    _load_owned_document(request, document_id, user_id)
    document = document_store.reject_document(request.app.state.database_service, document_id)

    request.app.state.audit_logger.log_document_rejected(
        user_id=user_id,
        document_id=document_id,
        ip_address=_client_ip(request)
    )

    return document


@router.get("/{document_id}/download")
async def download_document(
    document_id: str,
    request: Request,
    user_id: str = Depends(get_current_user)
):
    """
    Generate a signed URL to download the stored file.

    Returns:
        Signed URL valid for 15 minutes
    """
    document = _load_owned_document(request, document_id, user_id)

    try:
        url = request.app.state.storage_service.generate_signed_url(document.file_key)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Stored file not available for download"
        )

    return {
        "downloadUrl": url,
        "filename": document.name,
        "expiresIn": "15 minutes"
    }
