"""Managed content types and the resource paths they are served under."""

from enum import Enum

from cms_sync.domain.exceptions import UnknownContentTypeError


class ContentType(str, Enum):
    """Entity names as they appear in channel event types (``<entity>_<action>``)."""

    PROJECT = "project"
    SERVICE = "service"
    TEAM_MEMBER = "team_member"
    TESTIMONIAL = "testimonial"
    BLOG_POST = "blog_post"
    CATEGORY = "category"
    SUBSCRIBER = "subscriber"
    CONTACT_MESSAGE = "contact_message"

    @property
    def resource(self) -> str:
        """URL path segment, e.g. ``team-members``."""
        return _RESOURCES[self]

    @classmethod
    def from_resource(cls, resource: str) -> "ContentType":
        normalized = resource.strip("/")
        for content_type, path in _RESOURCES.items():
            if path == normalized:
                return content_type
        raise UnknownContentTypeError(resource)


_RESOURCES: dict[ContentType, str] = {
    ContentType.PROJECT: "projects",
    ContentType.SERVICE: "services",
    ContentType.TEAM_MEMBER: "team-members",
    ContentType.TESTIMONIAL: "testimonials",
    ContentType.BLOG_POST: "blog-posts",
    ContentType.CATEGORY: "categories",
    ContentType.SUBSCRIBER: "subscribers",
    ContentType.CONTACT_MESSAGE: "contact-messages",
}
