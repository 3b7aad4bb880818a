"""Abstract interface (port) for a notification channel connection."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable


class ChannelConnection(ABC):
    """One open connection to the notification channel."""

    @abstractmethod
    async def send(self, message: str) -> None:
        ...

    @abstractmethod
    async def recv(self) -> str:
        """Wait for the next text message.

        Raises ``ChannelClosedError`` carrying the close code once the
        connection is gone.
        """
        ...

    @abstractmethod
    async def close(self, code: int = 1000, reason: str = "") -> None:
        ...


# Opens a connection to the given URL; raises on failure.
ChannelConnector = Callable[[str], Awaitable[ChannelConnection]]
