import logging
from pathlib import Path

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates

from ota_index.api.index import router as index_router
from ota_index.api.sources import router as sources_router
from ota_index.core.dependencies import get_registry, get_server_config
from ota_index.domain.entities import SourceRegistry

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Zigbee OTA index merger",
    version="0.1.0",
    description="Merges Zigbee OTA firmware index sources into a single index.json.",
)

# HTML templates (Jinja2)
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

app.include_router(index_router, prefix="/api", tags=["index"])
app.include_router(sources_router, prefix="/api", tags=["sources"])


@app.on_event("startup")
async def startup_event() -> None:
    """
    Log the effective configuration so misconfigured server URLs are visible.
    """
    config = get_server_config()
    logger.info(f"Data directory: {config.data_dir}")
    logger.info(f"Server index sources: {config.index_source_urls or 'none'}")
    logger.info(f"Override position: {config.override_position.value}")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid payload"},
    )


@app.get("/", response_class=HTMLResponse)
async def index(request: Request, registry: SourceRegistry = Depends(get_registry)) -> HTMLResponse:
    """
    Source manager page. The initial state is rendered server-side; edits go
    through the /api/sources endpoints.
    """
    state = registry.get_state()
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "title": "Index source URL manager",
            "state": state.model_dump(mode="json", by_alias=True),
        },
    )


@app.get("/health")
async def health() -> dict:
    """
    Lightweight health check endpoint.
    """
    return {"status": "ok"}


if __name__ == "__main__":
    """
    Allow running `python -m ota_index.main` to start the Uvicorn development server.
    """
    import uvicorn

    uvicorn.run(
        "ota_index.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
