"""
Client-side routes and navigation.
"""

from typing import List, Optional


class Routes:
    HOME = "/"
    LOGIN = "/login"
    REGISTER = "/register"
    DOCUMENTS = "/documents"

    @staticmethod
    def document(document_id: str) -> str:
        return f"/documents/{document_id}"

    @staticmethod
    def sign(document_id: str) -> str:
        return f"/documents/{document_id}/sign"


class Router:
    """
    Records route transitions.

    Attributes:
        history: Every path pushed, oldest first
        reloads: Number of full-page reloads requested
    """

    def __init__(self, initial: str = Routes.HOME):
        self.history: List[str] = [initial]
        self.reloads = 0

    @property
    def current(self) -> Optional[str]:
        return self.history[-1] if self.history else None

    def push(self, path: str) -> None:
        self.history.append(path)

    def reload(self) -> None:
        self.reloads += 1
