"""Favicon resolver - walks the provider chain for one request.

Each inbound ``/<domain>.ico`` request is validated against the hostname
grammar and then tried against the providers in priority order. Provider
calls are strictly sequential: the first acceptable answer wins and the
remaining providers are never contacted.

Failure policy:
- Transport errors (DNS, timeouts, resets, redirect loops) are logged and the
  next provider is tried; they never reach the caller.
- A ``404`` ends the attempt only for providers flagged ``probe_404``.
- Any other response is accepted and streamed back as ``image/x-icon`` with a
  ``200`` status, whatever status the provider used.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable, Mapping
import logging
from typing import TYPE_CHECKING

import httpx
from starlette.responses import PlainTextResponse, Response, StreamingResponse

from favicons_proxy.domain.model import (
    PROVIDERS,
    FaviconError,
    FaviconNotFound,
    Provider,
    build_sources,
    parse_domain,
    request_path,
)
from favicons_proxy.observability.metrics import FAVICON_REQUESTS, PROVIDER_ATTEMPTS, track_latency
from favicons_proxy.observability.tracing import create_span
from favicons_proxy.ui.homepage import homepage_response


if TYPE_CHECKING:
    from starlette.requests import Request


logger = logging.getLogger(__name__)

ICON_HEADERS = {
    "Content-Type": "image/x-icon",
    "Cache-Control": "public, max-age=86400",
}

# Headers tied to the inbound connection; httpx sets its own for the upstream hop.
_EXCLUDED_HEADERS = frozenset(
    {
        "host",
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "proxy-connection",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
        "content-length",
        "accept-encoding",
    }
)


def forward_headers(headers: Mapping[str, str] | Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
    """Return the inbound headers that are safe to replay upstream."""
    items = headers.items() if isinstance(headers, Mapping) else headers
    return [(name, value) for name, value in items if name.lower() not in _EXCLUDED_HEADERS]


def request_origin(request: Request) -> str:
    """Return ``scheme://host[:port]`` for the inbound request."""
    return f"{request.url.scheme}://{request.url.netloc}"


def error_response(exc: FaviconError) -> Response:
    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def _stream_body(upstream: httpx.Response) -> AsyncIterator[bytes]:
    try:
        async for chunk in upstream.aiter_bytes():
            yield chunk
    finally:
        await upstream.aclose()


def icon_response(upstream: httpx.Response) -> StreamingResponse:
    """Stream an accepted provider body back with normalized icon headers."""
    return StreamingResponse(_stream_body(upstream), status_code=200, headers=ICON_HEADERS)


class FaviconResolver:
    """Resolve favicons through an ordered chain of upstream providers.

    The resolver keeps no per-request state; the shared ``httpx.AsyncClient``
    only pools connections.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        providers: tuple[Provider, ...] = PROVIDERS,
    ) -> None:
        self.client = client
        self.providers = providers

    async def handle(self, request: Request) -> Response:
        """Serve one inbound request: homepage, favicon or error."""
        path = request_path(request.scope)
        if path == "/":
            return homepage_response(request_origin(request))

        outcome = {"outcome": "error"}
        with track_latency(outcome):
            try:
                domain = parse_domain(path)
                upstream = await self.fetch(
                    domain,
                    method=request.method,
                    headers=forward_headers(request.headers.items()),
                )
                outcome["outcome"] = "served"
            except FaviconError as exc:
                outcome["outcome"] = exc.kind
                FAVICON_REQUESTS.labels(outcome=exc.kind).inc()
                return error_response(exc)

        FAVICON_REQUESTS.labels(outcome="served").inc()
        return icon_response(upstream)

    async def fetch(
        self,
        domain: str,
        *,
        method: str = "GET",
        headers: Iterable[tuple[str, str]] | Mapping[str, str] | None = None,
    ) -> httpx.Response:
        """Return the first acceptable provider response for ``domain``.

        The returned response is open in streaming mode; the caller owns it and
        must close it.

        Raises:
            FaviconNotFound: If every provider failed or reported no icon.
        """
        for provider, url in build_sources(domain, self.providers):
            with create_span(
                "favicon.provider",
                attributes={"favicon.provider": provider.name, "favicon.domain": domain, "http.url": url},
            ) as span:
                try:
                    upstream_request = self.client.build_request(method, url, headers=headers)
                    response = await self.client.send(upstream_request, stream=True, follow_redirects=True)
                except httpx.HTTPError as exc:
                    logger.warning("Error fetching from %s: %s", url, exc)
                    PROVIDER_ATTEMPTS.labels(provider=provider.name, outcome="transport_error").inc()
                    span.set_attribute("favicon.outcome", "transport_error")
                    continue

                span.set_attribute("http.status_code", response.status_code)
                if provider.probe_404 and response.status_code == 404:
                    await response.aclose()
                    logger.debug("Provider %s has no icon for %s", provider.name, domain)
                    PROVIDER_ATTEMPTS.labels(provider=provider.name, outcome="not_found").inc()
                    span.set_attribute("favicon.outcome", "not_found")
                    continue

                PROVIDER_ATTEMPTS.labels(provider=provider.name, outcome="accepted").inc()
                span.set_attribute("favicon.outcome", "accepted")
                logger.info(
                    "Serving favicon for %s from %s (upstream status %d)",
                    domain,
                    provider.name,
                    response.status_code,
                )
                return response

        raise FaviconNotFound()
