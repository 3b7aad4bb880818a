"""Abstract interface (port) for the remote content CRUD API."""

from abc import ABC, abstractmethod
from typing import Any


class ContentApi(ABC):
    """Port for the remote collection behind the admin list view.

    Implementations raise ``ContentApiError`` on failure.
    """

    @abstractmethod
    async def list(self, resource: str) -> list[dict[str, Any]]:
        """Fetch the full authoritative collection."""
        ...

    @abstractmethod
    async def create(self, resource: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Create a record and return it as stored."""
        ...

    @abstractmethod
    async def update(
        self, resource: str, identity: Any, patch: dict[str, Any]
    ) -> dict[str, Any]:
        """Apply ``patch`` to a record and return it as stored."""
        ...

    @abstractmethod
    async def delete(self, resource: str, identity: Any) -> None:
        """Delete a record. Safe to retry."""
        ...
