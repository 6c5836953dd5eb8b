"""
Per-document actions: open the signing page, sign, delete.
"""

import logging
from typing import Any, Callable, Dict, Optional

import httpx

from docsign.client.navigation import Router, Routes
from docsign.client.session import error_message
from docsign.exceptions import RemoteError

logger = logging.getLogger(__name__)

DELETE_CONFIRMATION = "Are you sure you want to delete this document?"


class DocumentActions:
    def __init__(
        self,
        http: httpx.AsyncClient,
        router: Router,
        confirm: Optional[Callable[[str], bool]] = None,
    ):
        """
        Args:
            http: Authenticated API client
            router: Navigation target
            confirm: Asks the user a yes/no question; deletes are unconfirmed when omitted
        """
        self.http = http
        self.router = router
        self.confirm = confirm

    def on_sign(self, document_id: str) -> None:
        self.router.push(Routes.sign(document_id))

    async def on_delete(self, document_id: str) -> bool:
        """
        Delete after confirmation and return to the list.

        Returns:
            False if the user declined

        Raises:
            RemoteError: If the delete failed (after logging it)
        """
        if self.confirm is not None and not self.confirm(DELETE_CONFIRMATION):
            return False

        await self._request("delete", f"/api/documents/{document_id}", document_id, "Failed to delete document")
        self.router.push(Routes.DOCUMENTS)
        return True

    async def sign(self, document_id: str, signature_img: str) -> Dict[str, Any]:
        """
        Sign a document and open it.

        Returns:
            The signed document as returned by the API
        """
        response = await self._request(
            "post",
            f"/api/documents/{document_id}/sign",
            document_id,
            "Failed to sign document",
            json={"signatureImg": signature_img},
        )
        self.router.push(Routes.document(document_id))
        return response.json()

    async def _request(self, method: str, url: str, document_id: str, fallback: str, **kwargs) -> httpx.Response:
        try:
            response = await self.http.request(method.upper(), url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{fallback}: {e}", extra={"document_id": document_id})
            raise RemoteError(f"{fallback}: {e}") from e

        if not response.is_success:
            message = error_message(response, fallback)
            logger.error(f"{fallback}: {message}", extra={"document_id": document_id})
            raise RemoteError(message, response.status_code)

        return response
