"""
Authentication schemas.
"""

from datetime import datetime
from typing import Optional
from pydantic import EmailStr, Field, model_validator
from docsign.models.document import ApiModel


class LoginCredentials(ApiModel):
    """Credentials accepted by the login form and the session endpoint."""
    email: EmailStr
    password: str = Field(..., min_length=6)


class RegisterData(ApiModel):
    """
    Registration payload.

    Attributes:
        name: Display name
        email: Account email, unique per user
        password: Plain password, hashed server-side
        confirm_password: Optional repeat of the password (client forms only)
    """
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    confirm_password: Optional[str] = Field(default=None, exclude=True)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.confirm_password is not None and self.confirm_password != self.password:
            raise ValueError("Passwords do not match")
        return self


class User(ApiModel):
    """Public view of an account."""
    id: str
    name: str
    email: str
    created_at: datetime


class SessionToken(ApiModel):
    """Response of a successful credential exchange."""
    token: str
    user: User
