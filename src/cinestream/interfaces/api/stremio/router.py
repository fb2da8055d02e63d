"""Stremio addon API endpoints (manifest, catalog, meta, stream)."""

from __future__ import annotations

from typing import Any, cast
from urllib.parse import parse_qs

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from cinestream import __version__
from cinestream.domain.entities.content import MediaKind
from cinestream.domain.entities.stremio import (
    StremioMeta,
    StremioMetaPreview,
    StremioStream,
)
from cinestream.infrastructure.persistence.identifier_store import ID_PREFIX
from cinestream.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["stremio"])

_ADDON_ID = "org.cinestream.addon"
_MEDIA_KINDS: tuple[MediaKind, ...] = ("movie", "series")
_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "*",
}


def _build_manifest(source_names: list[str]) -> dict[str, Any]:
    """Build the Stremio addon manifest."""
    extra = [
        {"name": "search", "isRequired": False},
        {"name": "skip", "isRequired": False},
    ]
    return {
        "id": _ADDON_ID,
        "version": __version__,
        "name": "CineStream",
        "description": (
            "Movies and TV series from " + ", ".join(source_names)
            if source_names
            else "Movies and TV series"
        ),
        "types": list(_MEDIA_KINDS),
        "catalogs": [
            {
                "type": "movie",
                "id": "cinestream-movies",
                "name": "CineStream Movies",
                "extra": extra,
            },
            {
                "type": "series",
                "id": "cinestream-series",
                "name": "CineStream TV Series",
                "extra": extra,
            },
        ],
        "resources": ["catalog", "meta", "stream"],
        "idPrefixes": [ID_PREFIX],
        "behaviorHints": {
            "adult": False,
            "configurable": False,
        },
    }


def _media_kind(content_type: str) -> MediaKind | None:
    if content_type in _MEDIA_KINDS:
        return cast(MediaKind, content_type)
    return None


def _parse_extra(extra: str) -> tuple[str | None, int]:
    """Parse a Stremio extra segment like ``search=iron%20man&skip=20``."""
    params = parse_qs(extra, keep_blank_values=True)
    search = params.get("search", [None])[0]
    try:
        skip = int(params.get("skip", ["0"])[0] or 0)
    except ValueError:
        skip = 0
    return search, max(skip, 0)


def _base_identifier(raw_id: str) -> str:
    """Strip the ``:season:episode`` suffix Stremio appends for series."""
    return raw_id.split(":", 1)[0]


def _format_preview(m: StremioMetaPreview) -> dict[str, str]:
    return {
        "id": m.id,
        "type": m.type,
        "name": m.name,
        "poster": m.poster,
        "description": m.description,
    }


def _format_meta(m: StremioMeta) -> dict[str, str]:
    return {
        "id": m.id,
        "type": m.type,
        "name": m.name,
        "description": m.description,
    }


def _format_stremio_stream(stream: StremioStream) -> dict[str, str]:
    return {
        "name": stream.name,
        "title": stream.title,
        "url": stream.url,
    }


@router.get("/manifest.json")
async def stremio_manifest(request: Request) -> JSONResponse:
    """Serve the Stremio addon manifest."""
    state = cast(AppState, request.app.state)
    names = [s.name for s in state.aggregator.sources]
    return JSONResponse(content=_build_manifest(names), headers=_CORS_HEADERS)


async def _catalog_response(
    state: AppState,
    content_type: str,
    catalog_id: str,
    search: str | None,
    skip: int,
) -> JSONResponse:
    kind = _media_kind(content_type)
    if kind is None:
        return JSONResponse(content={"metas": []}, headers=_CORS_HEADERS)

    log.info(
        "stremio_catalog_request",
        media_kind=kind,
        catalog_id=catalog_id,
        search=search,
        skip=skip,
    )
    metas = await state.stremio_uc.catalog(kind, search=search, skip=skip)
    return JSONResponse(
        content={"metas": [_format_preview(m) for m in metas]},
        headers=_CORS_HEADERS,
    )


@router.get("/catalog/{content_type}/{catalog_id}.json")
async def stremio_catalog(
    request: Request,
    content_type: str,
    catalog_id: str,
) -> JSONResponse:
    """Catalog without extras: no search term, so nothing to list."""
    state = cast(AppState, request.app.state)
    return await _catalog_response(state, content_type, catalog_id, None, 0)


@router.get("/catalog/{content_type}/{catalog_id}/{extra}.json")
async def stremio_catalog_extra(
    request: Request,
    content_type: str,
    catalog_id: str,
    extra: str,
) -> JSONResponse:
    """Catalog with ``search=...`` and/or ``skip=...`` extras."""
    state = cast(AppState, request.app.state)
    search, skip = _parse_extra(extra)
    return await _catalog_response(state, content_type, catalog_id, search, skip)


@router.get("/meta/{content_type}/{meta_id}.json")
async def stremio_meta(
    request: Request,
    content_type: str,
    meta_id: str,
) -> JSONResponse:
    """Metadata for a previously listed identifier (``null`` when expired)."""
    state = cast(AppState, request.app.state)
    kind = _media_kind(content_type)
    if kind is None:
        return JSONResponse(content={"meta": None}, headers=_CORS_HEADERS)

    meta = await state.stremio_uc.meta(kind, _base_identifier(meta_id))
    if meta is None:
        log.info("stremio_meta_not_found", id=meta_id)
        return JSONResponse(content={"meta": None}, headers=_CORS_HEADERS)
    return JSONResponse(content={"meta": _format_meta(meta)}, headers=_CORS_HEADERS)


@router.get("/stream/{content_type}/{stream_id}.json")
async def stremio_stream(
    request: Request,
    content_type: str,
    stream_id: str,
) -> JSONResponse:
    """Resolve playable streams for a previously listed identifier."""
    state = cast(AppState, request.app.state)
    if _media_kind(content_type) is None:
        return JSONResponse(content={"streams": []}, headers=_CORS_HEADERS)

    identifier = _base_identifier(stream_id)
    streams = await state.stremio_uc.streams(identifier)

    log.info("stremio_stream_response", id=identifier, streams=len(streams))
    return JSONResponse(
        content={"streams": [_format_stremio_stream(s) for s in streams]},
        headers=_CORS_HEADERS,
    )
