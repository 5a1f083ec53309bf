import asyncio
import logging
import threading
import time
import uuid
from typing import Callable

from .errors import ArtifactNotFound
from .interfaces import Artifact

logger = logging.getLogger(__name__)

DEFAULT_TTL_SEC = 600.0


def _cancel(loop: asyncio.AbstractEventLoop, handle: asyncio.TimerHandle) -> None:
    """Cancel handle on its own loop; TimerHandle.cancel is not thread-safe."""
    try:
        running = asyncio.get_running_loop()
    except RuntimeError:
        running = None
    if running is loop:
        handle.cancel()
    elif not loop.is_closed():
        loop.call_soon_threadsafe(handle.cancel)


class ArtifactStore:
    """In-memory, single-use store for rendered artifacts.

    Every entry is removed by whichever happens first: a successful
    ``take`` or its expiry timer. Each ``put`` keeps the ``TimerHandle``
    returned by ``loop.call_later`` next to the entry so that a winning
    ``take`` can cancel the pending expiry. All mutations of the mapping
    happen under one lock.
    """

    def __init__(
        self,
        *,
        ttl: float = DEFAULT_TTL_SEC,
        id_factory: Callable[[], object] = uuid.uuid4,
    ) -> None:
        self._ttl = ttl
        self._id_factory = id_factory
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[Artifact, asyncio.AbstractEventLoop, asyncio.TimerHandle]] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, artifact_id: object) -> bool:
        with self._lock:
            return artifact_id in self._entries

    def put(self, payload: bytes, filename: str) -> str:
        """Store payload under a fresh identifier and schedule its expiry.

        Must be called from a running event loop.
        """
        loop = asyncio.get_running_loop()
        artifact_id = str(self._id_factory())
        artifact = Artifact(
            id=artifact_id,
            payload=bytes(payload),
            filename=filename,
            created_at=time.monotonic(),
        )
        with self._lock:
            if artifact_id in self._entries:
                raise RuntimeError(f"identifier {artifact_id} already in use")
            handle = loop.call_later(self._ttl, self._expire, artifact_id)
            self._entries[artifact_id] = (artifact, loop, handle)
        logger.debug("Stored artifact %s (%d bytes, ttl=%ss)", artifact_id, len(artifact.payload), self._ttl)
        return artifact_id

    def take(self, artifact_id: str) -> Artifact:
        """Remove and return the artifact; raise ArtifactNotFound otherwise.

        Safe to call from any thread; the pending expiry is cancelled on the
        loop that scheduled it.
        """
        with self._lock:
            entry = self._entries.pop(artifact_id, None)
        if entry is None:
            raise ArtifactNotFound(artifact_id)
        artifact, loop, handle = entry
        _cancel(loop, handle)
        logger.debug("Artifact %s taken", artifact_id)
        return artifact

    def close(self) -> None:
        """Cancel every pending expiry and drop all entries."""
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()
        for _, loop, handle in entries:
            _cancel(loop, handle)
        if entries:
            logger.info("Artifact store closed, discarded %d artifact(s)", len(entries))

    def _expire(self, artifact_id: str) -> None:
        with self._lock:
            entry = self._entries.pop(artifact_id, None)
        if entry is not None:
            logger.debug("Artifact %s expired", artifact_id)
