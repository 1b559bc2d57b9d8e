"""
API client module

HTTP transport used by the provider integrations.
"""
from .base import (
    BaseAPIClient,
    APIResponse,
    APIError,
    APITimeoutError,
    AuthenticationError,
    NotFoundError,
    RateLimitError,
    ServerError,
)

__all__ = [
    "BaseAPIClient",
    "APIResponse",
    "APIError",
    "APITimeoutError",
    "AuthenticationError",
    "NotFoundError",
    "RateLimitError",
    "ServerError",
]
