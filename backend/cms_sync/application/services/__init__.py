from .change_broadcaster import ChangeBroadcaster
from .channel_supervisor import ChannelState, ChannelSupervisor, backoff_delay
from .content_service import ContentService
from .content_synchronizer import ContentSynchronizer
from .local_cache import LocalCache
from .reconciler import Reconciler, new_temp_key

__all__ = [
    "ChangeBroadcaster",
    "ChannelState",
    "ChannelSupervisor",
    "backoff_delay",
    "ContentService",
    "ContentSynchronizer",
    "LocalCache",
    "Reconciler",
    "new_temp_key",
]
