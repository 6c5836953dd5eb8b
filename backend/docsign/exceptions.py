"""
Error types shared by the store, the HTTP layer and the client.
"""

from typing import Optional


class DocSignError(Exception):
    """Base class for application errors."""


class StoreError(DocSignError):
    """
    A data-access operation failed.

    Attributes:
        operation: Name of the gateway operation that failed
        document_id: Identifier the operation was called with
    """

    def __init__(self, message: str, operation: str = None, document_id: str = None):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.document_id = document_id


class NotFoundError(StoreError):
    """The requested entity does not exist."""


class ConflictError(StoreError):
    """The entity exists but its current state forbids the operation."""


class RemoteError(DocSignError):
    """
    A remote call answered with a non-success status.

    Attributes:
        status_code: HTTP status of the response (None for transport faults)
        message: Human readable message taken from the body or a fallback
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SignInPendingError(DocSignError):
    """The account was created but the follow-up sign-in failed."""

    def __init__(self, message: str, email: str):
        super().__init__(message)
        self.message = message
        self.email = email


class OperationInProgressError(DocSignError):
    """A call was rejected because another one is still in flight."""


class UnknownStatusError(DocSignError):
    """A document status has no entry in the status-presentation table."""

    def __init__(self, status: str):
        super().__init__(f"No presentation configured for document status: {status!r}")
        self.status = status
