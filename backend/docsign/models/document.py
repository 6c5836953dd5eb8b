"""
Document data models and schemas.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class DocumentStatus(str, Enum):
    """
    Enumeration of possible document statuses in the signing workflow.
    """
    PENDING = "PENDING"
    SIGNED = "SIGNED"
    REJECTED = "REJECTED"


class ApiModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Signature(ApiModel):
    """
    Signature captured for a document.

    Attributes:
        id: Unique signature identifier
        document_id: Document that was signed
        user_id: User who signed
        signature_img: Reference to the signature image (data URL or storage key)
        signed_at: When the signature was applied, None until signed
        created_at: Creation timestamp
    """
    id: str
    document_id: str
    user_id: str
    signature_img: str
    signed_at: Optional[datetime] = None
    created_at: datetime


class Document(ApiModel):
    """
    Document model representing an uploaded file.

    Attributes:
        id: Unique identifier for the document
        name: Original filename
        size: File size in bytes, if known
        mime_type: MIME type, if known
        file_key: Storage key of the uploaded file
        status: Current status of the document in the workflow
        user_id: Owner of the document
        created_at: Timestamp when the document was created
        updated_at: Timestamp when the document was last updated
    """
    id: str = Field(..., description="Unique document identifier")
    name: str = Field(..., description="Original filename")
    size: Optional[int] = Field(default=None, description="File size in bytes")
    mime_type: Optional[str] = Field(default=None, description="MIME type")
    file_key: str = Field(..., description="Storage key of the file")
    status: DocumentStatus = Field(
        default=DocumentStatus.PENDING,
        description="Current document status"
    )
    user_id: Optional[str] = Field(default=None, description="Owner user id")
    created_at: datetime
    updated_at: datetime


class DocumentWithSignature(Document):
    """Document joined with its optional signature."""
    signature: Optional[Signature] = None


class DocumentUpdate(ApiModel):
    """Partial update payload; unset fields are left untouched."""
    name: Optional[str] = None
    size: Optional[int] = None
    mime_type: Optional[str] = None
    file_key: Optional[str] = None
    status: Optional[DocumentStatus] = None

    @field_validator("name", "file_key")
    @classmethod
    def not_null(cls, value: Optional[str]) -> str:
        # Defaults are not validated, so this only fires on an explicit null
        if value is None:
            raise ValueError("cannot be null")
        return value


class DocumentPatch(ApiModel):
    """
    Fields a document owner may edit through the API.

    Status moves only through signing and rejection, and the storage key is
    only set by the upload.
    """
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1)
    mime_type: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("cannot be null")
        return value


class SignRequest(ApiModel):
    """Request body for signing a document."""
    signature_img: str = Field(..., min_length=1)
