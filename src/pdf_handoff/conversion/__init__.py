"""
Domain layer for HTML to PDF conversion.
Provides interfaces (gateways), the ephemeral artifact store and a service
that orchestrates rendering and handoff, so front-ends (HTTP or others) can
use the same core logic.
"""

from .errors import ArtifactNotFound, ConversionError, InvalidRequest, RenderFailure
from .interfaces import Artifact, ConversionResult, PageLayout, RendererGateway
from .service import ConversionService
from .store import ArtifactStore
