"""
Database service for the document store.
Owns the SQLAlchemy engine, session factory and ORM models.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional
import logging

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class UserRecord(Base):
    """SQLAlchemy model for user accounts"""
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class DocumentRecord(Base):
    """SQLAlchemy model for documents"""
    __tablename__ = 'documents'

    # Primary key - UUID as string
    id = Column(String(36), primary_key=True, default=new_id)

    # Core fields
    user_id = Column(String(36), ForeignKey('users.id'), nullable=True, index=True)
    name = Column(String(500), nullable=False)
    mime_type = Column(String(100), nullable=True)
    size = Column(Integer, nullable=True)

    # Storage key of the uploaded file
    file_key = Column(Text, nullable=False)

    status = Column(String(50), nullable=False, default='PENDING', index=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    signature = relationship(
        "SignatureRecord",
        back_populates="document",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="joined",
    )


class SignatureRecord(Base):
    """SQLAlchemy model for document signatures"""
    __tablename__ = 'signatures'

    id = Column(String(36), primary_key=True, default=new_id)
    document_id = Column(
        String(36),
        ForeignKey('documents.id', ondelete='CASCADE'),
        nullable=False,
        unique=True,
    )
    user_id = Column(String(36), ForeignKey('users.id'), nullable=False, index=True)
    signature_img = Column(Text, nullable=False)
    signed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    document = relationship("DocumentRecord", back_populates="signature")


class DuplicateEmailError(Exception):
    """Raised when registering an email that already has an account"""


class DatabaseService:
    """Service for managing database connections and account operations"""

    def __init__(self, database_url: str, echo: bool = False):
        """
        Initialize database service

        Args:
            database_url: SQLAlchemy URL, e.g. postgresql+psycopg://... or sqlite://
            echo: Log emitted SQL
        """
        self.database_url = database_url
        self.echo = echo

        self.engine = None
        self.SessionLocal = None

        logger.info(f"Initializing DatabaseService for: {self._safe_url()}")

    def _safe_url(self) -> str:
        # Strip credentials before logging
        if "@" in self.database_url:
            scheme, _, rest = self.database_url.partition("://")
            return f"{scheme}://***@{rest.split('@', 1)[1]}"
        return self.database_url

    def _engine_options(self) -> dict:
        if not self.database_url.startswith("sqlite"):
            return {
                "pool_size": 5,
                "max_overflow": 2,
                "pool_timeout": 30,
                "pool_recycle": 1800,  # Recycle connections after 30 minutes
            }
        options = {"connect_args": {"check_same_thread": False}}
        if self.database_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every session sees an empty database
            options["poolclass"] = StaticPool
        return options

    def initialize(self):
        """Initialize database connection pool and create tables"""
        try:
            self.engine = create_engine(
                self.database_url,
                echo=self.echo,
                **self._engine_options()
            )

            # Create session factory
            self.SessionLocal = sessionmaker(
                autocommit=False,
                autoflush=False,
                expire_on_commit=False,
                bind=self.engine
            )

            # Create tables if they don't exist
            Base.metadata.create_all(bind=self.engine)
            logger.info("Database initialization complete. Tables created/verified.")

        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise

    def get_session(self) -> Session:
        """Get a new database session"""
        if not self.SessionLocal:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self.SessionLocal()

    def close(self):
        """Dispose of the connection pool"""
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Database engine disposed")

    # User operations

    def create_user(self, name: str, email: str, password_hash: str) -> UserRecord:
        """
        Create a new user account

        Args:
            name: Display name
            email: Account email (unique)
            password_hash: bcrypt hash of the password

        Returns:
            Created UserRecord

        Raises:
            DuplicateEmailError: If the email is already registered
        """
        session = self.get_session()
        try:
            user = UserRecord(name=name, email=email.lower(), password_hash=password_hash)
            session.add(user)
            session.commit()
            session.refresh(user)
            logger.info(f"Created user account: {user.id}")
            return user
        except IntegrityError:
            session.rollback()
            raise DuplicateEmailError(email)
        except Exception as e:
            session.rollback()
            logger.error(f"Failed to create user: {e}")
            raise
        finally:
            session.close()

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        """Get user by email"""
        session = self.get_session()
        try:
            return session.query(UserRecord).filter(
                UserRecord.email == email.lower()
            ).first()
        finally:
            session.close()

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        """Get user by ID"""
        session = self.get_session()
        try:
            return session.get(UserRecord, user_id)
        finally:
            session.close()

    def count_users(self, email: str) -> int:
        """Count accounts registered with an email"""
        session = self.get_session()
        try:
            return session.query(UserRecord).filter(
                UserRecord.email == email.lower()
            ).count()
        finally:
            session.close()
