"""
Source management endpoints.

`GET /api/sources` returns the current state; `POST /api/sources` replaces
the stored entries (and optionally the order). The remaining endpoints are
single-edit helpers used by the source manager page. Every write returns the
fresh state.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ota_index.core.dependencies import get_registry
from ota_index.domain.entities import SourceRegistry
from ota_index.domain.models import (
    AddRawRequest,
    AddUrlRequest,
    MoveEntryRequest,
    RemoveEntryRequest,
    SourcesState,
    SourcesUpdateRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _state_response(state: SourcesState) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=state.model_dump(mode="json", by_alias=True),
    )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.get("/sources")
async def get_sources(registry: SourceRegistry = Depends(get_registry)) -> JSONResponse:
    return _state_response(registry.get_state())


@router.post("/sources")
async def save_sources(request: Request, registry: SourceRegistry = Depends(get_registry)) -> JSONResponse:
    """
    Replace the stored sources.

    Accepts `{"entries": [...], "order": [...]}` or the legacy
    `{"urls": [...]}`. Without `order` the stored order is kept.
    """
    try:
        body = SourcesUpdateRequest.model_validate(await request.json())
    except (ValueError, ValidationError) as e:
        logger.warning(f"Rejected sources payload: {e}")
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid payload")

    if body.entries is not None:
        entries = body.entries
    elif body.urls is not None:
        entries = [{"type": "url", "value": value} for value in body.urls]
    else:
        entries = []

    stored = registry.save(entries, body.order)
    state = registry.get_state()
    state.stored_entries = stored.entries
    state.order = stored.order
    return _state_response(state)


@router.post("/sources/url")
async def add_url(body: AddUrlRequest, registry: SourceRegistry = Depends(get_registry)) -> JSONResponse:
    try:
        registry.add_url(body.url)
    except ValueError as e:
        return _error(status.HTTP_400_BAD_REQUEST, str(e))
    return _state_response(registry.get_state())


@router.post("/sources/raw")
async def add_raw(body: AddRawRequest, registry: SourceRegistry = Depends(get_registry)) -> JSONResponse:
    registry.add_raw(body.value)
    return _state_response(registry.get_state())


@router.post("/sources/remove")
async def remove_source(body: RemoveEntryRequest, registry: SourceRegistry = Depends(get_registry)) -> JSONResponse:
    try:
        registry.remove(body.id)
    except KeyError:
        return _error(status.HTTP_404_NOT_FOUND, "Source not found")
    except ValueError as e:
        return _error(status.HTTP_400_BAD_REQUEST, str(e))
    return _state_response(registry.get_state())


@router.post("/sources/move")
async def move_source(body: MoveEntryRequest, registry: SourceRegistry = Depends(get_registry)) -> JSONResponse:
    registry.move(body.id, body.direction)
    return _state_response(registry.get_state())
