"""
Application configuration management.
"""

from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        DATABASE_URL: SQLAlchemy database URL for the document store
        AUTH_SECRET: Secret used to sign and verify session JWTs
        AUTH_ALGORITHM: JWT signing algorithm
        SESSION_TTL_MINUTES: Lifetime of an issued session token
        SESSION_COOKIE_NAME: Cookie that carries the session token
        PROJECT_ID: GCP project identifier (storage and audit logging)
        UPLOAD_BUCKET: GCS bucket for uploaded documents
        AUDIT_LOGGING_ENABLED: Write audit events to Cloud Logging
        CORS_ALLOW_ORIGINS: Origins allowed to call the /api routes
        BODY_SIZE_LIMIT: Maximum request body size in bytes
        API_BASE_URL: Base URL the client layer talks to
        LOGIN_REDIRECT: Route the client lands on after login
        HTTP_TIMEOUT: Client request timeout in seconds (None keeps httpx defaults)
    """
    DATABASE_URL: str = "sqlite:///./docsign.db"
    AUTH_SECRET: str = "change-me"
    AUTH_ALGORITHM: str = "HS256"
    SESSION_TTL_MINUTES: int = 60 * 24
    SESSION_COOKIE_NAME: str = "docsign.session-token"
    PROJECT_ID: str = ""
    UPLOAD_BUCKET: str = ""
    AUDIT_LOGGING_ENABLED: bool = False
    CORS_ALLOW_ORIGINS: List[str] = ["*"]
    BODY_SIZE_LIMIT: int = 2 * 1024 * 1024
    API_BASE_URL: str = "http://localhost:8000"
    LOGIN_REDIRECT: str = "/"
    HTTP_TIMEOUT: Optional[float] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )


# Allowed methods and headers for cross-origin /api calls
CORS_ALLOW_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
CORS_ALLOW_HEADERS = [
    "X-CSRF-Token",
    "X-Requested-With",
    "Accept",
    "Accept-Version",
    "Authorization",
    "Content-Length",
    "Content-MD5",
    "Content-Type",
    "Date",
    "X-Api-Version",
]


# Global settings instance
settings = Settings()
