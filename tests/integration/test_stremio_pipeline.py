"""End-to-end: Stremio catalog search -> identifier -> stream resolution.

Runs the real app (lifespan, HttpxFetcher, ScrapingSource, identifier
store) against content sites mocked with respx.
"""

from __future__ import annotations

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from cinestream.infrastructure.config import AppConfig
from cinestream.interfaces.app import create_app

pytestmark = pytest.mark.integration

_VEGA = "https://vegamovies.test"
_BOLLY = "https://bollyflix.test"

_VEGA_SEARCH = """
<html><body>
  <article class="post-item">
    <a href="/iron-man-2008/"><img src="/wp-content/im.jpg"></a>
    <h2><a href="/iron-man-2008/">Iron Man (2008)</a></h2>
  </article>
</body></html>
"""

_BOLLY_SEARCH = """
<html><body>
  <div class="item"><h3><a href="https://bollyflix.test/iron-man-3/">Iron Man 3</a></h3></div>
</body></html>
"""

_VEGA_DETAIL = """
<html><body>
  <iframe src="https://player.test/e/im"></iframe>
  <a href="https://cdn.test/iron-man.mp4">Download</a>
</body></html>
"""

_EMBED_PAGE = '<video><source src="https://cdn.test/iron-man/master.m3u8"></video>'


def _config() -> AppConfig:
    return AppConfig.model_validate(
        {
            "sources": {
                "enabled": ["VegaMovies", "Bollyflix"],
                "base_urls": {"VegaMovies": _VEGA, "Bollyflix": _BOLLY},
            }
        }
    )


class TestBrowseThenPlay:
    def test_full_flow(self, respx_mock: respx.MockRouter) -> None:
        respx_mock.get(f"{_VEGA}/?s=iron%20man").respond(200, text=_VEGA_SEARCH)
        respx_mock.get(f"{_BOLLY}/?s=iron%20man").respond(200, text=_BOLLY_SEARCH)
        respx_mock.get(f"{_VEGA}/iron-man-2008/").respond(200, text=_VEGA_DETAIL)
        respx_mock.get("https://player.test/e/im").respond(200, text=_EMBED_PAGE)

        with TestClient(create_app(_config())) as client:
            catalog = client.get(
                "/catalog/movie/cinestream-movies/search=iron%20man.json"
            ).json()
            metas = catalog["metas"]
            assert [m["name"] for m in metas] == ["Iron Man (2008)", "Iron Man 3"]
            assert metas[0]["poster"] == f"{_VEGA}/wp-content/im.jpg"
            assert metas[0]["description"] == "From VegaMovies"
            assert metas[1]["description"] == "From Bollyflix"

            vega_id = metas[0]["id"]
            assert vega_id.startswith("cs_vegamovies_")

            meta = client.get(f"/meta/movie/{vega_id}.json").json()["meta"]
            assert meta["name"] == "Iron Man (2008)"

            streams = client.get(f"/stream/movie/{vega_id}.json").json()["streams"]

        assert streams == [
            {
                "name": "VegaMovies - 720p",
                "title": "VegaMovies - M3U8",
                "url": "https://cdn.test/iron-man/master.m3u8",
            },
            {
                "name": "VegaMovies - 720p",
                "title": "VegaMovies - MP4",
                "url": "https://cdn.test/iron-man.mp4",
            },
        ]

    def test_referer_matches_target_origin(self, respx_mock: respx.MockRouter) -> None:
        vega = respx_mock.get(f"{_VEGA}/?s=dune").respond(200, text="<html></html>")
        respx_mock.get(f"{_BOLLY}/?s=dune").respond(200, text="<html></html>")

        with TestClient(create_app(_config())) as client:
            client.get("/catalog/movie/cinestream-movies/search=dune.json")

        assert vega.calls.last.request.headers["Referer"] == _VEGA

    def test_one_site_down(self, respx_mock: respx.MockRouter) -> None:
        respx_mock.get(f"{_VEGA}/?s=iron%20man").mock(
            side_effect=httpx.ConnectError("refused")
        )
        respx_mock.get(f"{_BOLLY}/?s=iron%20man").respond(200, text=_BOLLY_SEARCH)

        with TestClient(create_app(_config())) as client:
            resp = client.get("/catalog/movie/cinestream-movies/search=iron%20man.json")

        assert resp.status_code == 200
        assert [m["name"] for m in resp.json()["metas"]] == ["Iron Man 3"]

    def test_all_sites_down(self, respx_mock: respx.MockRouter) -> None:
        respx_mock.get(f"{_VEGA}/?s=x").respond(503)
        respx_mock.get(f"{_BOLLY}/?s=x").respond(404)

        with TestClient(create_app(_config())) as client:
            resp = client.get("/catalog/series/cinestream-series/search=x.json")

        assert resp.status_code == 200
        assert resp.json() == {"metas": []}

    def test_stream_for_unknown_id(self) -> None:
        with TestClient(create_app(_config())) as client:
            resp = client.get("/stream/movie/cs_vegamovies_000000000000000000000000.json")
        assert resp.json() == {"streams": []}
