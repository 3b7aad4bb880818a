"""Managed content endpoints — public listing and admin CRUD."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from cms_sync.application.schemas.content_entry import (
    ContentDeleteResponse,
    ContentEntryResponse,
)
from cms_sync.application.services import ContentService
from cms_sync.domain.entities import ContentEntry, ContentType
from cms_sync.domain.exceptions import EntityNotFoundError, UnknownContentTypeError
from cms_sync.infrastructure.dependencies import get_content_service, require_admin_token

public_router = APIRouter(tags=["Content"])
admin_router = APIRouter(
    prefix="/admin",
    tags=["Content Admin"],
    dependencies=[Depends(require_admin_token)],
)


def resolve_content_type(resource: str) -> ContentType:
    """Path dependency — maps ``/api/<resource>`` onto a ContentType."""
    try:
        return ContentType.from_resource(resource)
    except UnknownContentTypeError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _to_response(entry: ContentEntry) -> ContentEntryResponse:
    return ContentEntryResponse.model_validate(entry.to_payload())


@public_router.get("/{resource}", response_model=list[ContentEntryResponse])
async def list_public_entries(
    content_type: ContentType = Depends(resolve_content_type),
    service: ContentService = Depends(get_content_service),
) -> list[ContentEntryResponse]:
    """List every entry of a content type."""
    entries = await service.list_entries(content_type)
    return [_to_response(e) for e in entries]


@admin_router.get("/{resource}", response_model=list[ContentEntryResponse])
async def list_admin_entries(
    content_type: ContentType = Depends(resolve_content_type),
    service: ContentService = Depends(get_content_service),
) -> list[ContentEntryResponse]:
    entries = await service.list_entries(content_type)
    return [_to_response(e) for e in entries]


@admin_router.post(
    "/{resource}", response_model=ContentEntryResponse, status_code=status.HTTP_201_CREATED
)
async def create_entry(
    data: dict[str, Any] = Body(...),
    content_type: ContentType = Depends(resolve_content_type),
    service: ContentService = Depends(get_content_service),
) -> ContentEntryResponse:
    """Create an entry; reserved keys in the body are ignored."""
    entry = await service.create_entry(content_type, data)
    return _to_response(entry)


@admin_router.put("/{resource}/{entry_id}", response_model=ContentEntryResponse)
async def update_entry(
    entry_id: str,
    data: dict[str, Any] = Body(...),
    content_type: ContentType = Depends(resolve_content_type),
    service: ContentService = Depends(get_content_service),
) -> ContentEntryResponse:
    """Merge the body into an entry addressed by numeric id or docId."""
    try:
        entry = await service.update_entry(content_type, entry_id, data)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return _to_response(entry)


@admin_router.delete("/{resource}/{entry_id}", response_model=ContentDeleteResponse)
async def delete_entry(
    entry_id: str,
    content_type: ContentType = Depends(resolve_content_type),
    service: ContentService = Depends(get_content_service),
) -> ContentDeleteResponse:
    """Delete an entry addressed by numeric id or docId."""
    try:
        entry = await service.delete_entry(content_type, entry_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    label = content_type.value.replace("_", " ").capitalize()
    return ContentDeleteResponse(
        message=f"{label} successfully deleted", id=entry.id, docId=entry.doc_id
    )
