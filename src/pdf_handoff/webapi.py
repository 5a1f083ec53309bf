import logging
import os
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field, field_validator

from pdf_handoff.conversion import (
    ArtifactNotFound,
    ArtifactStore,
    ConversionService,
    InvalidRequest,
    PageLayout,
    RendererGateway,
    RenderFailure,
)
from pdf_handoff.conversion.adapters import PlaywrightRenderer
from pdf_handoff.conversion.templates import DEFAULT_TEMPLATE

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# Global configuration defaults
ARTIFACT_TTL_SEC = float(os.getenv("ARTIFACT_TTL_SEC", "600"))
RENDER_TIMEOUT_SEC = float(os.getenv("RENDER_TIMEOUT_SEC", "30"))
MAX_BODY_MB = float(os.getenv("MAX_BODY_MB", "10"))
CORS_ALLOW_ORIGINS = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]
PLAYWRIGHT_HEADLESS = os.getenv("PLAYWRIGHT_HEADLESS", "true").lower() in {"1", "true", "yes", "on"}


class PreparePdfRequest(BaseModel):
    html: str | None = Field(None, description="HTML document to render")
    personName: str | None = Field(None, description="Name used to build the download filename")

    @field_validator("html", "personName", mode="before")
    @classmethod
    def _drop_non_strings(cls, value: object) -> str | None:
        # Anything but a string counts as not provided
        return value if isinstance(value, str) else None


async def _read_prepare_request(request: Request) -> PreparePdfRequest:
    """Parse the JSON body; a body that is not a JSON object is an empty request."""
    content_type = request.headers.get("content-type", "")
    data: object = None
    if content_type.split(";", 1)[0].strip().lower() == "application/json":
        try:
            data = await request.json()
        except ValueError:
            data = None
    if not isinstance(data, dict):
        data = {}
    return PreparePdfRequest.model_validate(data)


router = APIRouter()


def get_service(request: Request) -> ConversionService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": "not_ready", "message": "service not started"},
        )
    return service


@router.get("/health")
def health(service: ConversionService = Depends(get_service)) -> dict[str, object]:
    """Basic health check endpoint."""
    return {"status": "ok", "artifacts": len(service.store)}


@router.post("/prepare-pdf")
async def prepare_pdf(
    request: Request,
    template: str | None = Query(None),
    service: ConversionService = Depends(get_service),
) -> JSONResponse:
    """Render the posted HTML and return a single-use download link.

    Expects a JSON object body with ``html`` and an optional ``personName``.
    The PDF stays available for ARTIFACT_TTL_SEC seconds or until it is
    downloaded once, whichever comes first.
    """
    body = await _read_prepare_request(request)
    logger.info("Received name: %s", body.personName or "Name not provided")
    logger.info("Preparing PDF for template: %s", template or DEFAULT_TEMPLATE)

    try:
        result = await service.convert(body.html, template=template, person_name=body.personName)
    except InvalidRequest as e:
        raise HTTPException(status_code=400, detail={"code": "invalid_request", "message": str(e)})
    except RenderFailure:
        # Details stay in the server log
        raise HTTPException(
            status_code=500,
            detail={"code": "render_failed", "message": "failed to create PDF, check server logs for details"},
        )
    return JSONResponse(content=result.as_dict())


@router.get("/download/{artifact_id}")
async def download(artifact_id: str, service: ConversionService = Depends(get_service)) -> Response:
    try:
        artifact = service.take(artifact_id)
    except ArtifactNotFound:
        logger.info("Download requested for unknown or expired artifact %s", artifact_id)
        raise HTTPException(status_code=404, detail={"code": "not_found", "message": "PDF not found or expired"})
    return Response(
        content=artifact.payload,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


def create_app(
    renderer: RendererGateway | None = None,
    *,
    ttl: float = ARTIFACT_TTL_SEC,
    layout: PageLayout | None = None,
    max_body_mb: float = MAX_BODY_MB,
) -> FastAPI:
    """Build the application. The store lives for the lifespan of the app."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = ArtifactStore(ttl=ttl)
        app.state.service = ConversionService(
            store=store,
            renderer=renderer or PlaywrightRenderer(headless=PLAYWRIGHT_HEADLESS),
            layout=layout or PageLayout(timeout_ms=int(RENDER_TIMEOUT_SEC * 1000)),
        )
        logger.info("PDF handoff service started (ttl=%ss)", ttl)
        try:
            yield
        finally:
            store.close()
            app.state.service = None

    app = FastAPI(
        title="PDF Handoff Service",
        version=os.getenv("PDF_SERVICE_VERSION", "0.1.0"),
        description=(
            "Renders HTML documents to PDF and hands each result out through "
            "a single-use, short-lived download link."
        ),
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOW_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    max_bytes = int(max_body_mb * 1024 * 1024)

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        length = request.headers.get("content-length", "")
        if request.method == "POST" and length.isdigit() and int(length) > max_bytes:
            return JSONResponse(
                status_code=413,
                content={"detail": {"code": "payload_too_large", "message": f"body exceeds {max_body_mb:g} MB"}},
            )
        return await call_next(request)

    app.include_router(router)
    return app


app = create_app()


def run() -> None:
    """Run a development ASGI server using uvicorn.

    Exposes the app at host:port (default 0.0.0.0:4000). Set PORT env var to override.
    """
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "4000"))
    reload = os.getenv("RELOAD", "false").lower() in {"1", "true", "yes", "on"}

    uvicorn.run("pdf_handoff.webapi:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    run()
