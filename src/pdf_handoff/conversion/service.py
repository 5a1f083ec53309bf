import asyncio
import logging

from .errors import InvalidRequest, RenderFailure
from .filenames import build_filename
from .interfaces import Artifact, ConversionResult, PageLayout, RendererGateway
from .store import ArtifactStore
from .templates import inject_style, resolve_template, style_for

logger = logging.getLogger(__name__)

DOWNLOAD_PATH = "/download/{id}"


class ConversionService:
    """Core domain service turning HTML into a single-use PDF download.

    This service is framework-agnostic. It validates the request, applies
    the template styles, delegates rendering to the renderer gateway and
    parks the result in the artifact store it was given.
    """

    def __init__(
        self,
        store: ArtifactStore,
        renderer: RendererGateway,
        *,
        layout: PageLayout | None = None,
        download_path: str = DOWNLOAD_PATH,
    ) -> None:
        self._store = store
        self._renderer = renderer
        self._layout = layout or PageLayout()
        self._download_path = download_path

    @property
    def store(self) -> ArtifactStore:
        return self._store

    @property
    def layout(self) -> PageLayout:
        return self._layout

    async def convert(
        self,
        html: str | None,
        template: str | None = None,
        person_name: str | None = None,
    ) -> ConversionResult:
        """Render html to PDF, store it and return a reference to the download."""
        if not isinstance(html, str) or not html:
            raise InvalidRequest("missing html in request body")

        kind = resolve_template(template)
        filename = build_filename(person_name, kind)
        final_html = inject_style(html, style_for(kind))

        logger.info("Rendering PDF (template=%s, filename=%s)", kind, filename)
        pdf_bytes = await self._render(final_html)

        artifact_id = self._store.put(pdf_bytes, filename)
        logger.info("PDF ready: %s (%d bytes)", artifact_id, len(pdf_bytes))
        return ConversionResult(
            id=artifact_id,
            download_url=self._download_path.format(id=artifact_id),
            filename=filename,
        )

    def take(self, artifact_id: str) -> Artifact:
        return self._store.take(artifact_id)

    async def _render(self, html: str) -> bytes:
        timeout = self._layout.timeout_ms / 1000
        try:
            pdf_bytes = await asyncio.wait_for(self._renderer.render_pdf(html, self._layout), timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.error("PDF rendering timed out after %sms", self._layout.timeout_ms)
            raise RenderFailure("rendering timed out") from e
        except Exception as e:
            logger.exception("PDF rendering failed: %s", e)
            raise RenderFailure("rendering failed") from e
        if not pdf_bytes:
            logger.error("PDF rendering returned an empty result")
            raise RenderFailure("rendering returned no content")
        return bytes(pdf_bytes)
