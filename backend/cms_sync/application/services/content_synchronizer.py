"""Content Synchronizer — one admin list view kept in sync with the server."""

import logging
from typing import Any

from cms_sync.application.interfaces import ChannelConnector, ContentApi
from cms_sync.application.services.channel_supervisor import ChannelSupervisor
from cms_sync.application.services.local_cache import LocalCache
from cms_sync.application.services.reconciler import DEFAULT_REFETCH_DELAY, Reconciler
from cms_sync.domain.entities import ContentType, Entity

logger = logging.getLogger(__name__)


class ContentSynchronizer:
    """Owns the cache, reconciler and channel supervisor for one content type.

    Usage:
        async with build_content_synchronizer(ContentType.PROJECT) as projects:
            await projects.create({"title": "New site"})
            rows = projects.entries
    """

    def __init__(
        self,
        content_type: ContentType,
        api: ContentApi,
        connector: ChannelConnector,
        channel_url: str,
        *,
        refetch_delay: float = DEFAULT_REFETCH_DELAY,
        reconnect_max_attempts: int = 5,
        reconnect_base_delay: float = 1.0,
        reconnect_max_delay: float = 16.0,
    ) -> None:
        self._content_type = content_type
        self._cache = LocalCache()
        self._reconciler = Reconciler(
            self._cache,
            api,
            content_type.resource,
            refetch_delay=refetch_delay,
        )
        self._supervisor = ChannelSupervisor(
            channel_url,
            content_type.value,
            self._reconciler.apply_event,
            connector,
            max_attempts=reconnect_max_attempts,
            base_delay=reconnect_base_delay,
            max_delay=reconnect_max_delay,
        )

    @property
    def content_type(self) -> ContentType:
        return self._content_type

    @property
    def cache(self) -> LocalCache:
        return self._cache

    @property
    def reconciler(self) -> Reconciler:
        return self._reconciler

    @property
    def supervisor(self) -> ChannelSupervisor:
        return self._supervisor

    @property
    def entries(self) -> tuple[Entity, ...]:
        return self._cache.entries

    async def start(self, *, fetch: bool = True) -> None:
        """Load the collection, then start listening for changes."""
        if fetch:
            await self._reconciler.refetch()
        await self._supervisor.start()
        logger.info(
            "Synchronizer for %s started with %d entries",
            self._content_type.resource,
            len(self._cache),
        )

    async def stop(self) -> None:
        await self._supervisor.stop()
        await self._reconciler.close()

    async def refresh(self) -> bool:
        return await self._reconciler.refetch()

    async def create(self, payload: dict[str, Any]) -> Entity:
        return await self._reconciler.create(payload)

    async def update(self, identity: Any, patch: dict[str, Any]) -> Entity:
        return await self._reconciler.update(identity, patch)

    async def delete(self, identity: Any) -> None:
        await self._reconciler.delete(identity)

    async def __aenter__(self) -> "ContentSynchronizer":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()
