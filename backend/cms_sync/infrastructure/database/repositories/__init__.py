from .content_entry_repository import SQLAlchemyContentEntryRepository

__all__ = ["SQLAlchemyContentEntryRepository"]
