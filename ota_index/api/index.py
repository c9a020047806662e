from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ota_index.core.config import ServerConfig
from ota_index.core.dependencies import get_registry, get_resolver, get_server_config
from ota_index.domain.entities import SourceRegistry
from ota_index.domain.exceptions import SourcePayloadError
from ota_index.services.index_builder import build_merged_index
from ota_index.services.source_resolver import SourceResolver

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/index.json")
async def get_merged_index(
    registry: SourceRegistry = Depends(get_registry),
    resolver: SourceResolver = Depends(get_resolver),
    config: ServerConfig = Depends(get_server_config),
) -> JSONResponse:
    """
    Merged firmware index, served as a plain JSON array.

    Either the full merged list or a single error body is returned, never a
    partial list.
    """
    try:
        async with resolver:
            merged = await build_merged_index(registry, resolver, config.override_position)
    except SourcePayloadError as e:
        logger.error(f"Index merge failed: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"error": "Invalid JSON from source", "source": e.source},
        )
    except Exception as e:
        logger.error(f"Index merge failed: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to merge index sources"},
        )

    return JSONResponse(status_code=status.HTTP_200_OK, content=merged)
