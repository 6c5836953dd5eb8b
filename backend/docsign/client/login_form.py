"""
Login form: schema validation in front of the session provider.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from docsign.client.navigation import Router, Routes
from docsign.client.notifications import Notifier
from docsign.client.session import SessionProvider
from docsign.exceptions import RemoteError
from docsign.models.auth import LoginCredentials

logger = logging.getLogger(__name__)

LOGIN_FAILED_MESSAGE = "Login failed. Check your details and try again."
LOGIN_FAILED_TOAST = {
    "duration": 4000,
    "position": "top-right",
    "style": {"background": "#ef4444", "color": "#fff"},
}


def field_errors(error: ValidationError) -> Dict[str, str]:
    """First error message per field, keyed by field name."""
    errors: Dict[str, str] = {}
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "__root__"
        errors.setdefault(field, item["msg"])
    return errors


class LoginForm:
    """
    Attributes:
        errors: Field-level validation messages from the last validation
        is_submitting: True while credentials are being exchanged
    """

    def __init__(self, session: SessionProvider, router: Router, notifier: Notifier):
        self.session = session
        self.router = router
        self.notifier = notifier
        self.errors: Dict[str, str] = {}
        self.is_submitting = False

    def validate(self, data: Dict[str, Any]) -> Optional[LoginCredentials]:
        """Validate raw form input; on failure fill ``errors`` and return None."""
        try:
            credentials = LoginCredentials.model_validate(data)
        except ValidationError as e:
            self.errors = field_errors(e)
            return None
        self.errors = {}
        return credentials

    async def submit(self, data: Dict[str, Any]) -> bool:
        """
        Validate and sign in; navigate to the application root on success.

        Returns:
            True when the user was signed in
        """
        credentials = self.validate(data)
        if credentials is None or self.is_submitting:
            return False

        self.is_submitting = True
        try:
            result = await self.session.sign_in(credentials.email, credentials.password)
        except RemoteError as e:
            logger.error(f"Login request failed: {e}")
            self.notifier.error(LOGIN_FAILED_MESSAGE, **LOGIN_FAILED_TOAST)
            return False
        finally:
            self.is_submitting = False

        if result.error:
            self.notifier.error(LOGIN_FAILED_MESSAGE, **LOGIN_FAILED_TOAST)
            return False

        self.router.push(Routes.HOME)
        return True
