"""Wires a ContentSynchronizer from application settings."""

from urllib.parse import urlsplit, urlunsplit

import httpx

from cms_sync.application.services import ContentSynchronizer
from cms_sync.config import Settings, get_settings
from cms_sync.domain.entities import ContentType
from cms_sync.infrastructure.channel import connect_websocket
from cms_sync.infrastructure.http import HttpContentApi


def derive_channel_url(base_url: str, path: str = "/ws") -> str:
    """Notification channel URL on the API host: http→ws, https→wss."""
    parts = urlsplit(base_url)
    scheme = "wss" if parts.scheme in ("https", "wss") else "ws"
    return urlunsplit((scheme, parts.netloc, "/" + path.lstrip("/"), "", ""))


def build_content_synchronizer(
    content_type: ContentType,
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> ContentSynchronizer:
    """Build a synchronizer talking to ``settings.api_base_url``."""
    settings = settings or get_settings()
    api = HttpContentApi(
        settings.api_base_url,
        api_token=settings.admin_api_token,
        timeout=settings.request_timeout,
        delete_max_retries=settings.delete_max_retries,
        retry_base_delay=settings.retry_base_delay,
        http_client=http_client,
    )
    return ContentSynchronizer(
        content_type,
        api,
        connect_websocket,
        derive_channel_url(settings.api_base_url, settings.channel_path),
        refetch_delay=settings.refetch_delay,
        reconnect_max_attempts=settings.reconnect_max_attempts,
        reconnect_base_delay=settings.reconnect_base_delay,
        reconnect_max_delay=settings.reconnect_max_delay,
    )
