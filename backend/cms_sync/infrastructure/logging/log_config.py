"""Logging setup for the sync service.

The root level comes from ``log_level``; each noisy area of the service
(the entry store, outbound content API calls, the notification channel,
the reconciler) gets its own ``log_level_*`` setting so it can be turned
up or down on its own.  ``setup_logging()`` runs once from the app lifespan.
"""

import logging
import sys

from cms_sync.config import Settings, get_settings

_FORMAT = "%(levelname)-8s %(name)s: %(message)s"

# Settings field -> loggers it governs.
_CATEGORIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("log_level_sql", ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite")),
    ("log_level_http", ("httpx", "httpcore", "cms_sync.infrastructure.http")),
    ("log_level_uvicorn", ("uvicorn", "uvicorn.access", "uvicorn.error")),
    (
        "log_level_sync",
        (
            "ContentSync",
            "cms_sync.application.services.reconciler",
            "cms_sync.application.services.local_cache",
        ),
    ),
    (
        "log_level_channel",
        (
            "websockets",
            "cms_sync.application.services.channel_supervisor",
            "cms_sync.infrastructure.channel",
        ),
    ),
)


def setup_logging(settings: Settings | None = None) -> dict[str, int]:
    """Apply the configured levels and return them by logger name ("" is root)."""
    settings = settings or get_settings()
    applied = {"": level_from_name(settings.log_level)}

    root = logging.getLogger()
    root.setLevel(applied[""])
    # uvicorn installs its own handlers; scripts and tests may not have any.
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)

    for field_name, logger_names in _CATEGORIES:
        level = level_from_name(getattr(settings, field_name))
        for name in logger_names:
            logging.getLogger(name).setLevel(level)
            applied[name] = level

    logging.getLogger(__name__).debug(
        "Log levels: %s",
        ", ".join(f"{field_name}={getattr(settings, field_name)}" for field_name, _ in _CATEGORIES),
    )
    return applied


def level_from_name(name: str) -> int:
    """``"debug"`` -> ``logging.DEBUG``; unknown names fall back to INFO."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO
