"""
Document List View.

Fetches the caller's documents once per mount, adapts the API shape to the
display shape and renders a status-annotated HTML table, or an error view
with a retry control.
"""

import asyncio
import html
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx

from docsign.client.navigation import Router, Routes
from docsign.client.notifications import Notifier, TOAST_MESSAGES
from docsign.client.session import error_message
from docsign.exceptions import RemoteError, UnknownStatusError
from docsign.models.document import DocumentStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusPresentation:
    label: str
    icon: str
    color: str


# Status-presentation table; every DocumentStatus must have an entry
DOCUMENT_STATUS_CONFIG: Dict[str, StatusPresentation] = {
    DocumentStatus.PENDING.value: StatusPresentation(
        label="Pending", icon="clock", color="bg-yellow-100 text-yellow-800"
    ),
    DocumentStatus.SIGNED.value: StatusPresentation(
        label="Signed", icon="check-circle", color="bg-green-100 text-green-800"
    ),
    DocumentStatus.REJECTED.value: StatusPresentation(
        label="Rejected", icon="x-circle", color="bg-red-100 text-red-800"
    ),
}


def resolve_status(status: str) -> StatusPresentation:
    """Look up how a status is shown; unknown statuses are a programming error."""
    try:
        return DOCUMENT_STATUS_CONFIG[status]
    except KeyError:
        raise UnknownStatusError(status) from None


def format_file_size_in_mb(size: int) -> str:
    return f"{size / (1024 * 1024):.2f} MB"


def parse_timestamp(value: str) -> datetime:
    # fromisoformat only accepts a trailing "Z" from Python 3.11 on
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass
class DisplayDocument:
    """Document as the list view holds it."""
    id: str
    name: str
    size: Optional[int]
    mime_type: Optional[str]
    file_url: str
    status: str
    created_at: datetime
    updated_at: datetime


def adapt_document(item: Dict[str, Any]) -> DisplayDocument:
    """
    Convert one API document into its display form.

    ``fileKey`` becomes ``file_url``, missing size/MIME type become None and
    ISO timestamps are parsed.
    """
    return DisplayDocument(
        id=item["id"],
        name=item["name"],
        size=item.get("size"),
        mime_type=item.get("mimeType"),
        file_url=item["fileKey"],
        status=item["status"],
        created_at=parse_timestamp(item["createdAt"]),
        updated_at=parse_timestamp(item["updatedAt"]),
    )


@dataclass
class DocumentRow:
    """One rendered table row."""
    id: str
    name: str
    size_label: str
    status: StatusPresentation
    href: str


class ViewState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"


class DocumentListView:
    """
    Attributes:
        documents: Adapted documents in server order
        loading: True while a fetch is in flight
        error: Message of the last failed fetch
        state: Current ViewState
    """

    def __init__(self, http: httpx.AsyncClient, notifier: Notifier, router: Optional[Router] = None):
        self.http = http
        self.notifier = notifier
        self.router = router
        self.documents: List[DisplayDocument] = []
        self.loading = False
        self.error: Optional[str] = None
        self.state = ViewState.IDLE
        self._task: Optional[asyncio.Task] = None

    def mount(self) -> Optional[asyncio.Task]:
        """
        Start loading documents.

        Returns the fetch task (await it to wait for the result), or None when
        a fetch is already running.
        """
        if self.loading:
            return None
        self.loading = True
        self.state = ViewState.LOADING
        self._task = asyncio.ensure_future(self._fetch_documents())
        return self._task

    def unmount(self) -> None:
        """Abandon any in-flight request."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self.loading = False

    def retry(self) -> Optional[asyncio.Task]:
        """Full reload: drop current state and fetch again."""
        if self.router is not None:
            self.router.reload()
        self.unmount()
        self.documents = []
        self.error = None
        return self.mount()

    async def _fetch_documents(self) -> None:
        try:
            try:
                response = await self.http.get("/api/documents")
            except httpx.HTTPError as e:
                raise RemoteError(str(e) or "Error fetching documents") from e

            if not response.is_success:
                raise RemoteError(
                    error_message(response, "Failed to fetch documents"),
                    response.status_code,
                )

            payload = response.json()
            if not isinstance(payload, list):
                raise ValueError(f"expected a list of documents, got {type(payload).__name__}")

            self.documents = [adapt_document(item) for item in payload]
            self.error = None
            self.state = ViewState.LOADED

        except asyncio.CancelledError:
            logger.debug("Document fetch cancelled")
            raise
        except (RemoteError, ValueError, KeyError, TypeError) as e:
            message = e.message if isinstance(e, RemoteError) else f"Error fetching documents: {e}"
            logger.error(f"Error fetching documents: {message}")
            self.error = message
            self.state = ViewState.ERRORED
            self.notifier.error(TOAST_MESSAGES["documents"]["load_error"])
        finally:
            # A cancelled fetch must not clear the flag of a newer one
            if self._task is asyncio.current_task():
                self.loading = False

    def rows(self) -> List[DocumentRow]:
        """Rows in server order, each with its resolved status presentation."""
        return [
            DocumentRow(
                id=document.id,
                name=document.name,
                size_label=format_file_size_in_mb(document.size) if document.size else "-",
                status=resolve_status(document.status),
                href=Routes.document(document.id),
            )
            for document in self.documents
        ]

    def render(self) -> str:
        if self.state in (ViewState.IDLE, ViewState.LOADING):
            return '<div class="loading">Loading documents...</div>'

        if self.state == ViewState.ERRORED:
            return (
                '<div class="error">'
                f'<div class="text-red-500">{html.escape(self.error or "")}</div>'
                '<button type="button" data-action="reload">Try Again</button>'
                '</div>'
            )

        body = "".join(
            "<tr>"
            f'<td class="name">{html.escape(row.name)}</td>'
            f'<td class="size">{row.size_label}</td>'
            f'<td class="status"><span class="{row.status.color}" data-icon="{row.status.icon}">'
            f"{html.escape(row.status.label)}</span></td>"
            f'<td class="actions"><a href="{html.escape(row.href)}">View</a></td>'
            "</tr>"
            for row in self.rows()
        )
        return (
            "<table>"
            "<thead><tr><th>Name</th><th>Size</th><th>Status</th><th>Actions</th></tr></thead>"
            f"<tbody>{body}</tbody>"
            "</table>"
        )
