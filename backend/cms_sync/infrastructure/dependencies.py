"""FastAPI dependency injection — wires infrastructure to application layer."""

import secrets
from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cms_sync.config import get_settings
from cms_sync.application.services import ChangeBroadcaster, ContentService
from cms_sync.infrastructure.database.session import get_db_session
from cms_sync.infrastructure.database.repositories import SQLAlchemyContentEntryRepository


@lru_cache
def get_change_broadcaster() -> ChangeBroadcaster:
    """Process-wide broadcaster shared by the write endpoints and /ws."""
    return ChangeBroadcaster()


async def get_content_service(
    session: AsyncSession = Depends(get_db_session),
    broadcaster: ChangeBroadcaster = Depends(get_change_broadcaster),
) -> AsyncGenerator[ContentService, None]:
    """Provides a ContentService with its repository and broadcaster wired up."""
    repository = SQLAlchemyContentEntryRepository(session)
    yield ContentService(repository, broadcaster)


async def require_admin_token(authorization: str | None = Header(default=None)) -> None:
    """Guards admin routes with a bearer token when ``admin_api_token`` is set."""
    expected = get_settings().admin_api_token
    if not expected:
        return
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not secrets.compare_digest(token, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing admin token",
            headers={"WWW-Authenticate": "Bearer"},
        )
