"""Domain-specific exceptions — framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class UnknownContentTypeError(Exception):
    """Raised when a resource path does not name a managed content type."""

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"Unknown content resource '{resource}'")


class IdentityResolutionError(Exception):
    """Raised when a mutation target matches no cached record by any key.

    The mutation is never dispatched when this is raised.
    """

    def __init__(self, resource: str, identity: object):
        self.resource = resource
        self.identity = identity
        super().__init__(f"No {resource} record with identity '{identity}' in cache")


class ContentApiError(Exception):
    """Raised when a CRUD call against the content API fails.

    ``status_code`` is None for network failures and timeouts. ``retryable``
    is True for those, for 5xx responses and for HTML error pages.
    """

    def __init__(self, status_code: int | None, message: str, *, retryable: bool = False):
        self.status_code = status_code
        self.message = message
        self.retryable = retryable
        label = status_code if status_code is not None else "network"
        super().__init__(f"[{label}] {message}")


class ChannelMessageError(Exception):
    """Raised when a notification channel message cannot be parsed."""

    def __init__(self, raw: str, reason: str):
        self.raw = raw
        self.reason = reason
        super().__init__(f"Malformed channel message: {reason}")


class ChannelClosedError(Exception):
    """Raised by a channel connection when the peer or network closes it."""

    def __init__(self, code: int, reason: str = ""):
        self.code = code
        self.reason = reason
        super().__init__(f"Channel closed with code {code}: {reason or 'no reason'}")
