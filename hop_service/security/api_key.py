"""
Shared-secret gate applied to every inbound request.

Every path requires the API key header unless it is listed in the
exemption set (health and info endpoints by default).
"""

import logging
import secrets
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

from fastapi import status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Api-Key"


@dataclass(frozen=True)
class ApiKeyAuthConfig:
    """Immutable gate configuration, loaded once at startup"""
    api_key: str
    header_name: str = API_KEY_HEADER
    exempt_paths: FrozenSet[str] = frozenset()

    @classmethod
    def build(
        cls,
        api_key: str,
        header_name: str = API_KEY_HEADER,
        exempt_paths: Iterable[str] = (),
    ) -> "ApiKeyAuthConfig":
        if not api_key:
            raise ValueError("API key must not be empty")
        return cls(api_key=api_key, header_name=header_name, exempt_paths=frozenset(exempt_paths))


def is_request_allowed(config: ApiKeyAuthConfig, path: str, supplied_key: Optional[str]) -> bool:
    """
    Decide whether a request may reach the route handlers.

    Args:
        config: Gate configuration
        path: Request path without the query string
        supplied_key: Value of the API key header, None when missing

    Returns:
        True when the path is exempt or the key matches exactly
    """
    if path in config.exempt_paths:
        return True
    if supplied_key is None:
        return False
    return secrets.compare_digest(supplied_key.encode("utf-8"), config.api_key.encode("utf-8"))


class ApiKeyAuthMiddleware(BaseHTTPMiddleware):
    """Reject requests without the shared secret before routing happens"""

    def __init__(self, app: ASGIApp, config: ApiKeyAuthConfig):
        super().__init__(app)
        self.config = config

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        supplied_key = request.headers.get(self.config.header_name)

        if not is_request_allowed(self.config, path, supplied_key):
            logger.info("Rejected %s %s: missing or wrong API key", request.method, path)
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Unauthorized"},
            )

        return await call_next(request)
