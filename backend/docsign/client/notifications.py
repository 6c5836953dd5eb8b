"""
Transient user notifications (toasts) and their messages.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

logger = logging.getLogger(__name__)

TOAST_CONFIG = {
    "duration": 3000,
    "position": "top-right",
}

TOAST_MESSAGES = {
    "auth": {
        "login_success": "Logged in successfully.",
        "login_error": "Invalid email or password.",
        "register_success": "Account created successfully.",
        "register_error": "Could not create your account. Please try again.",
        "register_unavailable": "Registration endpoint not available. Please try again later.",
        "register_sign_in_pending": "Your account was created, but signing in failed. Please log in.",
        "logout_success": "You have been logged out.",
        "logout_error": "Could not log out cleanly. Please try again.",
    },
    "documents": {
        "load_error": "Failed to load documents. Please try again later.",
        "delete_error": "Failed to delete the document.",
    },
}


@dataclass
class Notification:
    """A single toast as it would be shown to the user."""
    kind: str
    message: str
    duration: int = TOAST_CONFIG["duration"]
    position: str = TOAST_CONFIG["position"]
    style: Dict[str, str] = field(default_factory=dict)


class Notifier:
    """Collects notifications in display order."""

    def __init__(self):
        self.notifications: List[Notification] = []

    def notify(self, kind: str, message: str, **options) -> Notification:
        notification = Notification(kind=kind, message=message, **{**TOAST_CONFIG, **options})
        self.notifications.append(notification)
        logger.debug(f"notify {kind}: {message}")
        return notification

    def success(self, message: str, **options) -> Notification:
        return self.notify("success", message, **options)

    def error(self, message: str, **options) -> Notification:
        return self.notify("error", message, **options)

    @property
    def last(self):
        return self.notifications[-1] if self.notifications else None
