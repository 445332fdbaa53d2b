"""Unit tests for the provider fallback chain.

Upstream providers are replaced by ``httpx.MockTransport`` so every test
controls exactly what each provider answers.
"""

from __future__ import annotations

import logging

import httpx
import pytest

from favicons_proxy.domain import FaviconNotFound, Provider
from favicons_proxy.service_layer.resolver import (
    ICON_HEADERS,
    FaviconResolver,
    error_response,
    forward_headers,
    icon_response,
)


async def _fetch_body(resolver: FaviconResolver, domain: str = "example.com", **kwargs) -> bytes:
    response = await resolver.fetch(domain, **kwargs)
    try:
        return await response.aread()
    finally:
        await response.aclose()


class TestFetch:
    @pytest.mark.asyncio
    async def test_first_provider_short_circuits(self, upstream):
        upstream.script(upstream.GOOGLE, upstream.respond(200, b"google-icon"))

        async with httpx.AsyncClient(transport=upstream.transport()) as client:
            body = await _fetch_body(FaviconResolver(client))

        assert body == b"google-icon"
        assert upstream.hosts_called() == [upstream.GOOGLE]
        assert str(upstream.calls[0].url) == "https://www.google.com/s2/favicons?domain=example.com&sz=50"

    @pytest.mark.asyncio
    async def test_falls_through_404s_to_last_provider(self, upstream):
        upstream.script(upstream.GOOGLE, upstream.respond(404))
        upstream.script(upstream.DUCKDUCKGO, upstream.respond(404))
        upstream.script(upstream.ICONHORSE, upstream.respond(200, b"horse-icon"))

        async with httpx.AsyncClient(transport=upstream.transport()) as client:
            body = await _fetch_body(FaviconResolver(client))

        assert body == b"horse-icon"
        assert upstream.hosts_called() == [upstream.GOOGLE, upstream.DUCKDUCKGO, upstream.ICONHORSE]

    @pytest.mark.asyncio
    async def test_second_provider_wins_after_404(self, upstream):
        upstream.script(upstream.GOOGLE, upstream.respond(404))
        upstream.script(upstream.DUCKDUCKGO, upstream.respond(200, b"ddg-icon"))

        async with httpx.AsyncClient(transport=upstream.transport()) as client:
            body = await _fetch_body(FaviconResolver(client))

        assert body == b"ddg-icon"
        assert upstream.hosts_called() == [upstream.GOOGLE, upstream.DUCKDUCKGO]

    @pytest.mark.asyncio
    async def test_non_404_error_status_is_accepted(self, upstream):
        upstream.script(upstream.GOOGLE, upstream.respond(500, b"oops"))

        async with httpx.AsyncClient(transport=upstream.transport()) as client:
            response = await FaviconResolver(client).fetch("example.com")
            await response.aclose()

        assert response.status_code == 500
        assert upstream.hosts_called() == [upstream.GOOGLE]

    @pytest.mark.asyncio
    async def test_last_provider_status_is_never_probed(self, upstream):
        upstream.script(upstream.ICONHORSE, upstream.respond(404, b"<html>not found</html>"))

        async with httpx.AsyncClient(transport=upstream.transport()) as client:
            body = await _fetch_body(FaviconResolver(client))

        assert body == b"<html>not found</html>"

    @pytest.mark.asyncio
    async def test_transport_errors_fall_through(self, upstream, caplog):
        upstream.script(upstream.GOOGLE, upstream.refuse)
        upstream.script(upstream.DUCKDUCKGO, upstream.time_out)
        upstream.script(upstream.ICONHORSE, upstream.respond(200, b"horse-icon"))

        with caplog.at_level(logging.WARNING, logger="favicons_proxy.service_layer.resolver"):
            async with httpx.AsyncClient(transport=upstream.transport()) as client:
                body = await _fetch_body(FaviconResolver(client))

        assert body == b"horse-icon"
        messages = [record.getMessage() for record in caplog.records]
        assert any("https://www.google.com/s2/favicons?domain=example.com&sz=50" in m for m in messages)
        assert any("https://icons.duckduckgo.com/ip3/example.com.ico" in m for m in messages)

    @pytest.mark.asyncio
    async def test_all_transport_errors_raise_not_found(self, upstream):
        for host in (upstream.GOOGLE, upstream.DUCKDUCKGO, upstream.ICONHORSE):
            upstream.script(host, upstream.refuse)

        async with httpx.AsyncClient(transport=upstream.transport()) as client:
            with pytest.raises(FaviconNotFound):
                await FaviconResolver(client).fetch("example.com")

        assert len(upstream.calls) == 3

    @pytest.mark.asyncio
    async def test_404s_then_transport_error_raise_not_found(self, upstream):
        upstream.script(upstream.ICONHORSE, upstream.refuse)

        async with httpx.AsyncClient(transport=upstream.transport()) as client:
            with pytest.raises(FaviconNotFound):
                await FaviconResolver(client).fetch("example.com")

    @pytest.mark.asyncio
    async def test_redirects_are_followed(self, upstream):
        def redirect(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/s2/favicons":
                return httpx.Response(302, headers={"Location": "https://www.google.com/final.ico"})
            return httpx.Response(200, content=b"after-redirect")

        upstream.script(upstream.GOOGLE, redirect)

        async with httpx.AsyncClient(transport=upstream.transport()) as client:
            body = await _fetch_body(FaviconResolver(client))

        assert body == b"after-redirect"
        assert [request.url.path for request in upstream.calls] == ["/s2/favicons", "/final.ico"]

    @pytest.mark.asyncio
    async def test_redirect_loop_counts_as_transport_error(self, upstream):
        upstream.script(
            upstream.GOOGLE,
            upstream.respond(302, headers={"Location": "https://www.google.com/loop"}),
        )
        upstream.script(upstream.DUCKDUCKGO, upstream.respond(200, b"ddg-icon"))

        async with httpx.AsyncClient(transport=upstream.transport()) as client:
            body = await _fetch_body(FaviconResolver(client))

        assert body == b"ddg-icon"

    @pytest.mark.asyncio
    async def test_method_and_headers_are_forwarded(self, upstream):
        upstream.script(upstream.GOOGLE, upstream.respond(200))

        async with httpx.AsyncClient(transport=upstream.transport()) as client:
            await _fetch_body(
                FaviconResolver(client),
                method="HEAD",
                headers=[("user-agent", "test-agent"), ("x-request-id", "abc")],
            )

        sent = upstream.calls[0]
        assert sent.method == "HEAD"
        assert sent.headers["user-agent"] == "test-agent"
        assert sent.headers["x-request-id"] == "abc"
        assert sent.headers["host"] == upstream.GOOGLE

    @pytest.mark.asyncio
    async def test_repeated_lookups_are_independent(self, upstream):
        upstream.script(upstream.DUCKDUCKGO, upstream.respond(200, b"ddg-icon"))

        async with httpx.AsyncClient(transport=upstream.transport()) as client:
            resolver = FaviconResolver(client)
            first = await _fetch_body(resolver)
            second = await _fetch_body(resolver)

        assert first == second == b"ddg-icon"
        assert upstream.hosts_called() == [upstream.GOOGLE, upstream.DUCKDUCKGO] * 2

    @pytest.mark.asyncio
    async def test_custom_chain_uses_probe_flag(self, upstream):
        providers = (
            Provider(name="strict", url_template="https://strict.test/{domain}", probe_404=True),
            Provider(name="lenient", url_template="https://lenient.test/{domain}", probe_404=False),
        )
        upstream.script("lenient.test", upstream.respond(404, b"lenient-404"))

        async with httpx.AsyncClient(transport=upstream.transport()) as client:
            body = await _fetch_body(FaviconResolver(client, providers=providers))

        assert body == b"lenient-404"
        assert upstream.hosts_called() == ["strict.test", "lenient.test"]


class TestForwardHeaders:
    def test_drops_connection_scoped_headers(self):
        headers = [
            ("Host", "proxy.local"),
            ("Connection", "keep-alive"),
            ("Content-Length", "0"),
            ("Accept-Encoding", "br"),
            ("Transfer-Encoding", "chunked"),
            ("User-Agent", "browser"),
            ("Accept", "image/*"),
        ]
        assert forward_headers(headers) == [("User-Agent", "browser"), ("Accept", "image/*")]

    def test_accepts_mapping(self):
        assert forward_headers({"host": "proxy.local", "referer": "https://site.test/"}) == [
            ("referer", "https://site.test/")
        ]

    def test_keeps_repeated_headers(self):
        headers = [("cookie", "a=1"), ("cookie", "b=2")]
        assert forward_headers(headers) == headers


class TestResponses:
    @pytest.mark.asyncio
    async def test_icon_response_normalizes_headers_and_closes_upstream(self):
        upstream = httpx.Response(
            201,
            headers={"Content-Type": "image/png", "Set-Cookie": "tracking=1"},
            content=b"\x00\x00\x01\x00",
        )

        response = icon_response(upstream)
        chunks = [chunk async for chunk in response.body_iterator]

        assert response.status_code == 200
        assert response.headers["content-type"] == ICON_HEADERS["Content-Type"]
        assert response.headers["cache-control"] == "public, max-age=86400"
        assert "set-cookie" not in response.headers
        assert b"".join(chunks) == b"\x00\x00\x01\x00"
        assert upstream.is_closed

    def test_error_response_is_plain_text(self):
        response = error_response(FaviconNotFound())

        assert response.status_code == 404
        assert response.body == b"Favicon not found"
        assert response.headers["content-type"].startswith("text/plain")
