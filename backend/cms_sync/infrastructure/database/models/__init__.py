from .content_entry import ContentEntryModel

__all__ = ["ContentEntryModel"]
