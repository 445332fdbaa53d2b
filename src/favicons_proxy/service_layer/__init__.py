"""Service layer - favicon lookup orchestration.

Coordinates the domain rules with the outbound HTTP client and turns domain
errors into HTTP responses.
"""

from .resolver import (
    ICON_HEADERS,
    FaviconResolver,
    error_response,
    forward_headers,
    icon_response,
    request_origin,
)


__all__ = [
    "ICON_HEADERS",
    "FaviconResolver",
    "error_response",
    "forward_headers",
    "icon_response",
    "request_origin",
]
