import logging

from .interfaces import PageLayout, RendererGateway

logger = logging.getLogger(__name__)


class PlaywrightRenderer(RendererGateway):
    """Render HTML with headless Chromium driven by Playwright.

    A fresh browser is launched for every render.
    """

    def __init__(self, *, headless: bool = True) -> None:
        self._headless = headless

    async def render_pdf(self, html: str, layout: PageLayout) -> bytes:
        # Imported here to avoid loading Playwright until the first render
        from playwright.async_api import async_playwright

        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=self._headless)
            try:
                page = await browser.new_page()
                page.set_default_timeout(layout.timeout_ms)
                await page.set_content(html, wait_until="networkidle")
                pdf_bytes = await page.pdf(
                    format=layout.format,
                    print_background=layout.print_background,
                    margin=layout.margins,
                    scale=layout.quality / 100,
                )
            finally:
                await browser.close()

        logger.debug("Chromium produced %d byte PDF", len(pdf_bytes))
        return pdf_bytes
