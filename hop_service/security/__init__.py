"""
Request authorization for the link shortener.
"""

from .api_key import API_KEY_HEADER, ApiKeyAuthConfig, ApiKeyAuthMiddleware, is_request_allowed

__all__ = [
    "API_KEY_HEADER",
    "ApiKeyAuthConfig",
    "ApiKeyAuthMiddleware",
    "is_request_allowed",
]
