class ConversionError(Exception):
    """Base class for errors raised by the conversion domain layer."""


class InvalidRequest(ConversionError, ValueError):
    """The caller supplied no document (or an unusable one)."""


class RenderFailure(ConversionError):
    """The renderer errored or exceeded its timeout. Nothing was stored."""


class ArtifactNotFound(ConversionError, LookupError):
    """The artifact is unknown, expired, or has already been retrieved."""

    def __init__(self, artifact_id: str) -> None:
        super().__init__(f"artifact {artifact_id} not found or expired")
        self.artifact_id = artifact_id
