from .channel import ChannelMessage, parse_channel_message, to_change_event
from .content_entry import ContentDeleteResponse, ContentEntryResponse

__all__ = [
    "ChannelMessage",
    "parse_channel_message",
    "to_change_event",
    "ContentDeleteResponse",
    "ContentEntryResponse",
]
