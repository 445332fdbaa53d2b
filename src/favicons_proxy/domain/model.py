"""Domain model - request paths, hostnames and favicon providers.

The domain layer has no infrastructure dependencies: it knows how to turn an
inbound path into a validated hostname and which upstream URLs to try for it,
but never performs network access itself.

Validation always runs before any provider URL is built, so the proxy cannot
be used as an open relay for arbitrary URLs.
"""

from __future__ import annotations

from collections.abc import Mapping
import re
from typing import Any

from pydantic import Field
from pydantic.dataclasses import dataclass


ICO_SUFFIX = ".ico"

# Labels of 1-63 chars, alphanumeric plus inner hyphens, at least two labels.
_DOMAIN_PATTERN = re.compile(
    r"(?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z0-9][a-z0-9-]{0,61}[a-z0-9]",
    re.IGNORECASE,
)


class FaviconError(Exception):
    """Base error for user-visible favicon lookup failures."""

    status_code: int = 500
    message: str = "Internal error"
    kind: str = "error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


class MissingDomain(FaviconError):
    """Raised when the request path does not name a ``.ico`` resource."""

    status_code = 400
    message = "Missing domain"
    kind = "missing_domain"


class InvalidDomain(FaviconError):
    """Raised when the extracted domain fails the hostname grammar."""

    status_code = 404
    message = "Invalid domain format"
    kind = "invalid_domain"


class FaviconNotFound(FaviconError):
    """Raised when every provider failed or reported no icon."""

    status_code = 404
    message = "Favicon not found"
    kind = "not_found"


@dataclass(frozen=True)
class Provider:
    """Value object describing one upstream favicon service.

    ``probe_404`` marks providers whose ``404`` answer reliably means
    "no icon for this domain". Providers without it are accepted on any
    response that makes it through the transport.
    """

    name: str = Field(min_length=1)
    url_template: str = Field(pattern=r"^https://.*\{domain\}")
    probe_404: bool = True

    def url_for(self, domain: str) -> str:
        return self.url_template.format(domain=domain)


PROVIDERS: tuple[Provider, ...] = (
    Provider(
        name="google",
        url_template="https://www.google.com/s2/favicons?domain={domain}&sz=50",
        probe_404=True,
    ),
    Provider(
        name="duckduckgo",
        url_template="https://icons.duckduckgo.com/ip3/{domain}.ico",
        probe_404=True,
    ),
    # icon.horse serves a placeholder instead of a reliable 404.
    Provider(
        name="iconhorse",
        url_template="https://icon.horse/icon/{domain}",
        probe_404=False,
    ),
)


def request_path(scope: Mapping[str, Any]) -> str:
    """Return the request path from an ASGI scope exactly as the client sent it.

    Percent-escapes are kept, so ``/exa%6Dple.com.ico`` is validated as written
    rather than as ``example.com``. Falls back to the decoded ``path`` when the
    server does not provide ``raw_path``.
    """
    raw_path = scope.get("raw_path")
    if raw_path:
        return raw_path.decode("latin-1")
    return scope.get("path", "")


def is_valid_domain(domain: str) -> bool:
    """Return True when ``domain`` is a syntactically valid hostname."""
    return _DOMAIN_PATTERN.fullmatch(domain) is not None


def extract_domain(path: str) -> str:
    """Strip the leading slash and trailing ``.ico`` from a request path.

    Raises:
        MissingDomain: If the path does not end with ``.ico``.
    """
    if not path.endswith(ICO_SUFFIX):
        raise MissingDomain()
    return path[1:].removesuffix(ICO_SUFFIX)


def parse_domain(path: str) -> str:
    """Extract and validate the domain named by ``path``.

    Raises:
        MissingDomain: If the path does not end with ``.ico``.
        InvalidDomain: If the extracted domain is not a valid hostname.
    """
    domain = extract_domain(path)
    if not is_valid_domain(domain):
        raise InvalidDomain()
    return domain


def build_sources(domain: str, providers: tuple[Provider, ...] = PROVIDERS) -> list[tuple[Provider, str]]:
    """Return ``(provider, url)`` pairs in priority order."""
    return [(provider, provider.url_for(domain)) for provider in providers]
