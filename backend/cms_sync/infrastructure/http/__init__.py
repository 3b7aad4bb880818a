from .content_api_client import HttpContentApi

__all__ = ["HttpContentApi"]
