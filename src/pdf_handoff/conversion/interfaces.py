from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class PageLayout:
    format: str = "A4"
    margin: str = "15mm"
    quality: int = 100
    timeout_ms: int = 30000
    print_background: bool = True

    @property
    def margins(self) -> dict[str, str]:
        return {side: self.margin for side in ("top", "right", "bottom", "left")}


class RendererGateway(Protocol):
    async def render_pdf(self, html: str, layout: PageLayout) -> bytes:
        """Render the given markup to PDF bytes using the page layout.
        Implementations may raise any exception; the service treats it as a
        render failure.
        """


@dataclass(frozen=True)
class Artifact:
    id: str
    payload: bytes = field(repr=False)
    filename: str
    created_at: float


@dataclass(frozen=True)
class ConversionResult:
    id: str
    download_url: str
    filename: str

    def as_dict(self) -> dict[str, str]:
        return {"id": self.id, "downloadUrl": self.download_url, "filename": self.filename}
