from .channel_connection import ChannelConnection, ChannelConnector
from .content_api import ContentApi
from .content_entry_repository import ContentEntryRepository

__all__ = [
    "ChannelConnection",
    "ChannelConnector",
    "ContentApi",
    "ContentEntryRepository",
]
