"""Abstract repository interface (port) for ContentEntry persistence."""

from abc import ABC, abstractmethod

from cms_sync.domain.entities import ContentEntry


class ContentEntryRepository(ABC):
    """Port for content entry persistence — implemented in the infrastructure layer."""

    @abstractmethod
    async def get(self, content_type: str, entry_id: str) -> ContentEntry | None:
        """Retrieve one entry by numeric id or document id."""
        ...

    @abstractmethod
    async def get_all(self, content_type: str) -> list[ContentEntry]:
        """Retrieve all entries of a content type, oldest first."""
        ...

    @abstractmethod
    async def create(self, entry: ContentEntry) -> ContentEntry:
        """Persist a new entry and return it with its id assigned."""
        ...

    @abstractmethod
    async def update(self, entry: ContentEntry) -> ContentEntry:
        """Update an existing entry."""
        ...

    @abstractmethod
    async def delete(self, entry: ContentEntry) -> bool:
        """Delete an entry. Returns True if deleted, False if not found."""
        ...
