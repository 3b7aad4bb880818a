from .change_event import ChangeAction, ChangeEvent
from .content_entry import ContentEntry
from .content_type import ContentType
from .entity import Entity
from .mutation import Mutation, MutationKind, MutationState

__all__ = [
    "ChangeAction",
    "ChangeEvent",
    "ContentEntry",
    "ContentType",
    "Entity",
    "Mutation",
    "MutationKind",
    "MutationState",
]
