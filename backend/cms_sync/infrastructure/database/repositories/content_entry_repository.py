"""Concrete repository implementation for ContentEntry backed by SQLAlchemy."""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from cms_sync.application.interfaces import ContentEntryRepository
from cms_sync.domain.entities import ContentEntry
from cms_sync.infrastructure.database.models import ContentEntryModel


class SQLAlchemyContentEntryRepository(ContentEntryRepository):
    """Implements the ContentEntryRepository port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_entity(self, model: ContentEntryModel) -> ContentEntry:
        """Map ORM model → domain entity."""
        return ContentEntry(
            id=model.id,
            doc_id=model.doc_id,
            content_type=model.content_type,
            data=dict(model.data or {}),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: ContentEntry) -> ContentEntryModel:
        """Map domain entity → ORM model (for creation)."""
        return ContentEntryModel(
            doc_id=entity.doc_id,
            content_type=entity.content_type,
            data=entity.data,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    async def _get_model(self, content_type: str, entry_id: str) -> ContentEntryModel | None:
        # Either key addresses an entry: the numeric id or the document id.
        key = ContentEntryModel.doc_id == entry_id
        if entry_id.isdigit():
            key = or_(key, ContentEntryModel.id == int(entry_id))
        stmt = select(ContentEntryModel).where(
            ContentEntryModel.content_type == content_type, key
        )
        result = await self._session.execute(stmt)
        return result.scalars().first()

    async def get(self, content_type: str, entry_id: str) -> ContentEntry | None:
        model = await self._get_model(content_type, entry_id)
        return self._to_entity(model) if model else None

    async def get_all(self, content_type: str) -> list[ContentEntry]:
        stmt = (
            select(ContentEntryModel)
            .where(ContentEntryModel.content_type == content_type)
            .order_by(ContentEntryModel.id)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def create(self, entry: ContentEntry) -> ContentEntry:
        model = self._to_model(entry)
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def update(self, entry: ContentEntry) -> ContentEntry:
        model = await self._session.get(ContentEntryModel, entry.id)
        if model is None:
            raise ValueError(f"ContentEntry {entry.id} not found in database")
        # A fresh dict so the JSON column registers the change.
        model.data = dict(entry.data)
        model.updated_at = entry.updated_at
        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, entry: ContentEntry) -> bool:
        model = await self._session.get(ContentEntryModel, entry.id)
        if model is None:
            return False
        await self._session.delete(model)
        await self._session.flush()
        return True
