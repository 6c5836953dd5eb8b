import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from google.cloud import logging as cloud_logging

logger = logging.getLogger(__name__)


class AuditLoggingService:
    def __init__(self, project_id: str, enabled: bool = True, client: Optional[cloud_logging.Client] = None):
        """
        Initialize audit logging service.

        Args:
            project_id: GCP project ID
            enabled: Send events to Cloud Logging (otherwise only the local logger sees them)
            client: Pre-built Cloud Logging client (created on first use when omitted)
        """
        self.project_id = project_id
        self.enabled = enabled
        self._client = client
        self._logger = None

    @property
    def cloud_logger(self):
        if self._logger is None:
            if self._client is None:
                self._client = cloud_logging.Client(project=self.project_id)
            self._logger = self._client.logger("docsign-audit")
        return self._logger

    def log_event(
        self,
        event_type: str,
        user_id: str,
        severity: str = "INFO",
        document_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Log an audit event.

        Args:
            event_type: Type of event (e.g., "document_uploaded", "document_signed")
            user_id: User who performed the action
            severity: Log severity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            document_id: Document ID (if applicable)
            ip_address: Client IP address
            details: Additional event details
        """
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type,
            "user_id": user_id,
            "severity": severity
        }

        if document_id:
            log_entry["document_id"] = document_id

        if ip_address:
            log_entry["ip_address"] = ip_address

        if details:
            log_entry["details"] = details

        logger.log(logging.getLevelName(severity), f"audit {event_type}", extra={"audit": log_entry})

        if not self.enabled:
            return

        try:
            self.cloud_logger.log_struct(log_entry, severity=severity)
        except Exception as e:
            # Audit delivery never fails the request
            logger.warning(f"Failed to write audit event {event_type}: {e}")

    # Convenience methods for common events

    def log_document_uploaded(self, user_id: str, document_id: str, filename: str,
                              file_size: int, ip_address: Optional[str] = None):
        """Log document upload event"""
        self.log_event(
            event_type="document_uploaded",
            user_id=user_id,
            document_id=document_id,
            ip_address=ip_address,
            details={
                "filename": filename,
                "file_size_bytes": file_size,
            }
        )

    def log_document_signed(self, user_id: str, document_id: str,
                            ip_address: Optional[str] = None):
        """Log document signature event"""
        self.log_event(
            event_type="document_signed",
            user_id=user_id,
            document_id=document_id,
            ip_address=ip_address,
        )

    def log_document_rejected(self, user_id: str, document_id: str,
                              ip_address: Optional[str] = None):
        """Log document rejection event"""
        self.log_event(
            event_type="document_rejected",
            user_id=user_id,
            document_id=document_id,
            severity="WARNING",
            ip_address=ip_address,
        )

    def log_document_deleted(self, user_id: str, document_id: str, file_key: str = None,
                             ip_address: Optional[str] = None):
        """Log document deletion event"""
        details = {"file_key": file_key} if file_key else None
        self.log_event(
            event_type="document_deleted",
            user_id=user_id,
            document_id=document_id,
            severity="WARNING",
            ip_address=ip_address,
            details=details
        )

    def log_unauthorized_access(self, user_id: str, document_id: str,
                                reason: str, ip_address: Optional[str] = None):
        """Log unauthorized access attempt"""
        self.log_event(
            event_type="unauthorized_access",
            user_id=user_id,
            document_id=document_id,
            severity="WARNING",
            ip_address=ip_address,
            details={"reason": reason}
        )

    def log_user_registered(self, user_id: str, user_email: str,
                            ip_address: Optional[str] = None):
        """Log account creation"""
        self.log_event(
            event_type="user_registered",
            user_id=user_id,
            ip_address=ip_address,
            details={"user_email": user_email}
        )

    def log_user_login(self, user_id: str, user_email: str,
                       ip_address: Optional[str] = None):
        """Log user login event"""
        self.log_event(
            event_type="user_login",
            user_id=user_id,
            ip_address=ip_address,
            details={"user_email": user_email}
        )

    def log_authentication_failed(self, error: str,
                                  ip_address: Optional[str] = None):
        """Log authentication failure"""
        self.log_event(
            event_type="authentication_failed",
            user_id="unknown",
            severity="WARNING",
            ip_address=ip_address,
            details={"error": error}
        )
