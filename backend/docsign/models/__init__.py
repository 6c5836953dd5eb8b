from docsign.models.auth import LoginCredentials, RegisterData, SessionToken, User
from docsign.models.document import (
    ApiModel,
    Document,
    DocumentStatus,
    DocumentPatch,
    DocumentUpdate,
    DocumentWithSignature,
    Signature,
    SignRequest,
)

__all__ = [
    "ApiModel",
    "Document",
    "DocumentStatus",
    "DocumentPatch",
    "DocumentUpdate",
    "DocumentWithSignature",
    "LoginCredentials",
    "RegisterData",
    "SessionToken",
    "Signature",
    "SignRequest",
    "User",
]
