"""Shared fixtures for the PDF handoff service tests."""

import asyncio

import pytest

FAKE_PDF = b"%PDF-1.4 fake pdf content"


class StubRenderer:
    """Renderer gateway double that records every call."""

    def __init__(self, result: bytes = FAKE_PDF, error: Exception | None = None, delay: float = 0.0):
        self.result = result
        self.error = error
        self.delay = delay
        self.calls = []

    async def render_pdf(self, html, layout):
        self.calls.append((html, layout))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def renderer():
    return StubRenderer()
