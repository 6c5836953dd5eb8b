"""
Document persistence gateway.

Thin wrappers that turn a document identifier (and optional payload) into a
single ORM operation. Every failure is logged with the operation name, the
document id and the underlying cause, then raised as StoreError or
NotFoundError.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError

from docsign.exceptions import ConflictError, NotFoundError, StoreError
from docsign.models.document import DocumentStatus, DocumentUpdate, DocumentWithSignature
from docsign.services.database_service import DatabaseService, DocumentRecord, SignatureRecord, utcnow

logger = logging.getLogger(__name__)

# Columns a partial update may touch
UPDATABLE_FIELDS = {"name", "size", "mime_type", "file_key", "status"}


def _log_failure(operation: str, document_id: Optional[str], cause: Any) -> None:
    logger.error(
        f"Failed to {operation.replace('_', ' ')}: {cause}",
        extra={"operation": operation, "document_id": document_id, "cause": str(cause)},
    )


def _to_model(document: DocumentRecord) -> DocumentWithSignature:
    return DocumentWithSignature.model_validate(document)


def create_document(
    db: DatabaseService,
    name: str,
    file_key: str,
    user_id: Optional[str] = None,
    size: Optional[int] = None,
    mime_type: Optional[str] = None,
    doc_id: Optional[str] = None,
) -> DocumentWithSignature:
    """
    Create a new document record in PENDING status.

    Args:
        db: Database service
        name: Original filename
        file_key: Storage key of the uploaded file
        user_id: Owner of the document
        size: File size in bytes
        mime_type: MIME type of the file
        doc_id: Explicit identifier (generated when omitted)

    Returns:
        The created document
    """
    session = db.get_session()
    try:
        document = DocumentRecord(
            user_id=user_id,
            name=name,
            file_key=file_key,
            size=size,
            mime_type=mime_type,
            status=DocumentStatus.PENDING.value,
        )
        if doc_id is not None:
            document.id = doc_id
        session.add(document)
        session.commit()
        session.refresh(document)
        logger.info(f"Created document record: {document.id}")
        return _to_model(document)
    except SQLAlchemyError as e:
        session.rollback()
        _log_failure("create_document", doc_id, e)
        raise StoreError("Failed to create document", "create_document", doc_id) from e
    finally:
        session.close()


def get_document(db: DatabaseService, doc_id: str) -> DocumentWithSignature:
    """
    Fetch one document together with its signature, if any.

    Raises:
        NotFoundError: If no document has this id
        StoreError: On any lower-level data-access fault
    """
    session = db.get_session()
    try:
        document = session.get(DocumentRecord, doc_id)
        if document is None:
            raise NotFoundError("Document not found", "get_document", doc_id)
        return _to_model(document)
    except SQLAlchemyError as e:
        _log_failure("get_document", doc_id, e)
        raise StoreError("Failed to fetch document", "get_document", doc_id) from e
    except NotFoundError as e:
        _log_failure("get_document", doc_id, e)
        raise
    finally:
        session.close()


def list_documents(db: DatabaseService, user_id: Optional[str] = None) -> List[DocumentWithSignature]:
    """
    List documents, newest first, optionally restricted to one owner.
    """
    session = db.get_session()
    try:
        query = session.query(DocumentRecord)
        if user_id is not None:
            query = query.filter(DocumentRecord.user_id == user_id)
        documents = query.order_by(DocumentRecord.created_at.desc()).all()
        return [_to_model(document) for document in documents]
    except SQLAlchemyError as e:
        _log_failure("list_documents", None, e)
        raise StoreError("Failed to list documents", "list_documents") from e
    finally:
        session.close()


def update_document(
    db: DatabaseService,
    doc_id: str,
    updates: Union[DocumentUpdate, Dict[str, Any]],
) -> DocumentWithSignature:
    """
    Apply a partial update to a document.

    Args:
        db: Database service
        doc_id: Document identifier
        updates: Fields to change; unset fields are left as they are

    Returns:
        The updated document

    Raises:
        StoreError: If the row is missing, the update would change the id,
            names an unknown field, or violates a constraint
    """
    if isinstance(updates, DocumentUpdate):
        fields = updates.model_dump(exclude_unset=True)
    else:
        fields = dict(updates)

    if "id" in fields and fields["id"] != doc_id:
        _log_failure("update_document", doc_id, "document ids are immutable")
        raise StoreError("Document id cannot be changed", "update_document", doc_id)
    fields.pop("id", None)

    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        _log_failure("update_document", doc_id, f"unknown fields {sorted(unknown)}")
        raise StoreError(f"Unknown document fields: {', '.join(sorted(unknown))}", "update_document", doc_id)

    if "status" in fields and fields["status"] is not None:
        try:
            fields["status"] = DocumentStatus(fields["status"]).value
        except ValueError as e:
            _log_failure("update_document", doc_id, e)
            raise StoreError(f"Invalid document status: {fields['status']}", "update_document", doc_id) from e

    session = db.get_session()
    try:
        document = session.get(DocumentRecord, doc_id)
        if document is None:
            _log_failure("update_document", doc_id, "no such document")
            raise StoreError("Document not found", "update_document", doc_id)

        for key, value in fields.items():
            setattr(document, key, value)

        document.updated_at = utcnow()
        session.commit()
        session.refresh(document)
        logger.info(f"Updated document: {doc_id}")
        return _to_model(document)
    except SQLAlchemyError as e:
        session.rollback()
        _log_failure("update_document", doc_id, e)
        raise StoreError("Failed to update document", "update_document", doc_id) from e
    finally:
        session.close()


def delete_document(db: DatabaseService, doc_id: str) -> DocumentWithSignature:
    """
    Hard-delete a document and its signature.

    Returns:
        The document as it was before deletion

    Raises:
        StoreError: If the row does not exist or the store rejects the delete
    """
    session = db.get_session()
    try:
        document = session.get(DocumentRecord, doc_id)
        if document is None:
            _log_failure("delete_document", doc_id, "no such document")
            raise StoreError("Document not found", "delete_document", doc_id)

        deleted = _to_model(document)
        session.delete(document)
        session.commit()
        logger.info(f"Deleted document: {doc_id}")
        return deleted
    except SQLAlchemyError as e:
        session.rollback()
        _log_failure("delete_document", doc_id, e)
        raise StoreError("Failed to delete document", "delete_document", doc_id) from e
    finally:
        session.close()


def sign_document(db: DatabaseService, doc_id: str, user_id: str, signature_img: str) -> DocumentWithSignature:
    """
    Attach a signature to a document and mark it SIGNED.

    Raises:
        NotFoundError: If the document does not exist
        ConflictError: If the document is already signed or was rejected
    """
    session = db.get_session()
    try:
        document = session.get(DocumentRecord, doc_id)
        if document is None:
            _log_failure("sign_document", doc_id, "no such document")
            raise NotFoundError("Document not found", "sign_document", doc_id)
        if document.signature is not None:
            _log_failure("sign_document", doc_id, "already signed")
            raise ConflictError("Document is already signed", "sign_document", doc_id)
        if document.status == DocumentStatus.REJECTED.value:
            _log_failure("sign_document", doc_id, "document was rejected")
            raise ConflictError("Rejected documents cannot be signed", "sign_document", doc_id)

        now = utcnow()
        document.signature = SignatureRecord(
            user_id=user_id,
            signature_img=signature_img,
            signed_at=now,
        )
        document.status = DocumentStatus.SIGNED.value
        document.updated_at = now
        session.commit()
        session.refresh(document)
        logger.info(f"Signed document: {doc_id}")
        return _to_model(document)
    except SQLAlchemyError as e:
        session.rollback()
        _log_failure("sign_document", doc_id, e)
        raise StoreError("Failed to sign document", "sign_document", doc_id) from e
    finally:
        session.close()


def reject_document(db: DatabaseService, doc_id: str) -> DocumentWithSignature:
    """
    Mark a pending document REJECTED.

    Raises:
        NotFoundError: If the document does not exist
        ConflictError: If the document is not pending
    """
    current = get_document(db, doc_id)
    if current.status != DocumentStatus.PENDING:
        _log_failure("reject_document", doc_id, f"status is {current.status.value}")
        raise ConflictError(
            f"Document cannot be rejected. Current status: {current.status.value}",
            "reject_document",
            doc_id,
        )
    return update_document(db, doc_id, {"status": DocumentStatus.REJECTED})
