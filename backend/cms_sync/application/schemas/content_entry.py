"""Pydantic DTOs (Data Transfer Objects) for content entries."""

from datetime import datetime

from pydantic import BaseModel, Field


class ContentEntryResponse(BaseModel):
    """Schema returned to the client — entry data fields are flattened alongside the keys."""

    id: int
    docId: str
    createdAt: datetime
    updatedAt: datetime

    model_config = {"extra": "allow"}


class ContentDeleteResponse(BaseModel):
    """Schema returned after a successful delete."""

    message: str = Field(..., examples=["Project successfully deleted"])
    id: int
    docId: str
