"""Tests for HttpxFetcher and its header helpers."""

from __future__ import annotations

import httpx
import pytest
import respx

from cinestream.domain.exceptions import NetworkError
from cinestream.infrastructure.config.defaults import DEFAULT_USER_AGENT
from cinestream.infrastructure.http.fetcher import (
    HttpxFetcher,
    build_headers,
    create_http_client,
    origin_of,
)

_URL = "https://vegamovies.test/iron-man-2008/"


class TestOriginOf:
    def test_strips_path_and_query(self) -> None:
        assert origin_of("https://site.test/a/b?c=1#d") == "https://site.test"

    def test_keeps_port(self) -> None:
        assert origin_of("http://site.test:8080/x") == "http://site.test:8080"

    def test_relative_url_rejected(self) -> None:
        with pytest.raises(ValueError):
            origin_of("/relative/path")


class TestBuildHeaders:
    def test_browser_headers(self) -> None:
        headers = build_headers(_URL)
        assert headers["User-Agent"] == DEFAULT_USER_AGENT
        assert headers["Accept"].startswith("text/html")
        assert headers["Accept-Language"] == "en-US,en;q=0.5"
        assert headers["Referer"] == "https://vegamovies.test"

    def test_overrides_applied_last(self) -> None:
        headers = build_headers(
            _URL, overrides={"Referer": "https://other.test/", "X-Extra": "1"}
        )
        assert headers["Referer"] == "https://other.test/"
        assert headers["X-Extra"] == "1"


class TestHttpxFetcher:
    @respx.mock
    @pytest.mark.asyncio()
    async def test_returns_body(self) -> None:
        respx.get(_URL).respond(200, text="<html>ok</html>")

        async with httpx.AsyncClient() as client:
            body = await HttpxFetcher(client).fetch(_URL)
        assert body == "<html>ok</html>"

    @respx.mock
    @pytest.mark.asyncio()
    async def test_sends_same_origin_referer(self) -> None:
        route = respx.get(_URL).respond(200, text="ok")

        async with httpx.AsyncClient() as client:
            await HttpxFetcher(client, user_agent="TestAgent/1.0").fetch(_URL)

        request = route.calls.last.request
        assert request.headers["Referer"] == "https://vegamovies.test"
        assert request.headers["User-Agent"] == "TestAgent/1.0"

    @respx.mock
    @pytest.mark.asyncio()
    async def test_extra_headers_forwarded(self) -> None:
        route = respx.get(_URL).respond(200, text="ok")

        async with httpx.AsyncClient() as client:
            await HttpxFetcher(client).fetch(_URL, headers={"Cookie": "a=1"})
        assert route.calls.last.request.headers["Cookie"] == "a=1"

    @respx.mock
    @pytest.mark.asyncio()
    async def test_non_2xx_raises_network_error(self) -> None:
        respx.get(_URL).respond(404, text="not found")

        async with httpx.AsyncClient() as client:
            with pytest.raises(NetworkError) as exc_info:
                await HttpxFetcher(client).fetch(_URL)
        assert exc_info.value.status_code == 404
        assert exc_info.value.url == _URL

    @respx.mock
    @pytest.mark.asyncio()
    async def test_server_error_raises_network_error(self) -> None:
        respx.get(_URL).respond(503)

        async with httpx.AsyncClient() as client:
            with pytest.raises(NetworkError) as exc_info:
                await HttpxFetcher(client).fetch(_URL)
        assert exc_info.value.status_code == 503

    @respx.mock
    @pytest.mark.asyncio()
    async def test_connection_error(self) -> None:
        respx.get(_URL).mock(side_effect=httpx.ConnectError("refused"))

        async with httpx.AsyncClient() as client:
            with pytest.raises(NetworkError) as exc_info:
                await HttpxFetcher(client).fetch(_URL)
        assert exc_info.value.status_code is None
        assert "ConnectError" in exc_info.value.reason

    @respx.mock
    @pytest.mark.asyncio()
    async def test_timeout(self) -> None:
        respx.get(_URL).mock(side_effect=httpx.ReadTimeout("slow"))

        async with httpx.AsyncClient() as client:
            with pytest.raises(NetworkError, match="timeout"):
                await HttpxFetcher(client).fetch(_URL)

    @respx.mock
    @pytest.mark.asyncio()
    async def test_follows_redirects(self) -> None:
        target = "https://vegamovies.test/moved/"
        respx.get(_URL).respond(301, headers={"Location": target})
        respx.get(target).respond(200, text="moved here")

        client = create_http_client()
        try:
            body = await HttpxFetcher(client).fetch(_URL)
        finally:
            await client.aclose()
        assert body == "moved here"

    @respx.mock
    @pytest.mark.asyncio()
    async def test_redirect_loop_hits_limit(self) -> None:
        respx.get(_URL).respond(302, headers={"Location": _URL})

        client = create_http_client(max_redirects=5)
        try:
            with pytest.raises(NetworkError, match="too many redirects"):
                await HttpxFetcher(client).fetch(_URL)
        finally:
            await client.aclose()

    @pytest.mark.asyncio()
    async def test_invalid_url(self) -> None:
        async with httpx.AsyncClient() as client:
            with pytest.raises(NetworkError, match="invalid URL"):
                await HttpxFetcher(client).fetch("not-a-url")


class TestClientOwnership:
    @pytest.mark.asyncio()
    async def test_injected_client_not_closed(self) -> None:
        async with httpx.AsyncClient() as client:
            await HttpxFetcher(client).aclose()
            assert not client.is_closed

    @pytest.mark.asyncio()
    async def test_owned_client_closed(self) -> None:
        fetcher = HttpxFetcher()
        await fetcher.aclose()
        assert fetcher._client.is_closed
