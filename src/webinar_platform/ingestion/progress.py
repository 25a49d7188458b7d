"""In-memory progress sessions for long-running presentation analyses.

A ProgressStore is owned by whoever runs analyses and is injected into the
analyzer. Records are evicted two ways:

- explicitly, by the consumer, after it has observed a terminal state
  (``stream_progress`` does this);
- by TTL, for sessions nobody polled, whenever a new session is created or
  ``evict_expired`` is called.
"""

import asyncio
import json
import threading
import time
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

import structlog

from webinar_platform.ingestion.models import Slide

logger = structlog.get_logger(__name__)


class AnalysisStatus(str, Enum):
    """Lifecycle of an analysis session."""

    STARTING = "starting"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (AnalysisStatus.COMPLETED, AnalysisStatus.ERROR)


@dataclass
class AnalysisProgress:
    """Snapshot of one analysis session."""

    session_id: str
    progress: int = 0
    total: int = 100
    status: AnalysisStatus = AnalysisStatus.STARTING
    message: str = "Analyse wird gestartet..."
    slides: list[Slide] = field(default_factory=list)
    error: str | None = None
    updated_at: float = field(default_factory=time.monotonic)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "progress": self.progress,
            "total": self.total,
            "status": self.status.value,
            "message": self.message,
            "slides": [slide.to_dict() for slide in self.slides],
            "error": self.error,
        }


# Signature of the callback extractors use to report milestones.
ProgressCallback = Callable[[float, str], None]


class ProgressStore:
    """Thread-safe map of session id to AnalysisProgress.

    Extractors run in a worker thread and report from there, so every access
    goes through a lock. Reads return copies.
    """

    def __init__(self, ttl_seconds: float | None = 600.0, clock: Callable[[], float] = time.monotonic):
        """Initialize store.

        Args:
            ttl_seconds: Idle time after which a session is evicted. None disables TTL.
            clock: Monotonic time source (injectable for tests).
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: dict[str, AnalysisProgress] = {}
        self._lock = threading.Lock()

    def create(self, session_id: str) -> AnalysisProgress:
        self.evict_expired()
        record = AnalysisProgress(session_id=session_id, updated_at=self._clock())
        with self._lock:
            self._sessions[session_id] = record
        logger.debug("Progress session created", session_id=session_id)
        return replace(record)

    def update(self, session_id: str, **changes: Any) -> AnalysisProgress | None:
        """Shallow-merge changes into a session. Unknown ids are ignored."""
        if "status" in changes:
            changes["status"] = AnalysisStatus(changes["status"])
        with self._lock:
            record = self._sessions.get(session_id)
            if record is None:
                return None
            record = replace(record, **changes, updated_at=self._clock())
            self._sessions[session_id] = record
            return replace(record)

    def get(self, session_id: str) -> AnalysisProgress | None:
        with self._lock:
            record = self._sessions.get(session_id)
            return replace(record) if record else None

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def evict_expired(self) -> list[str]:
        """Drop sessions idle for longer than the TTL and return their ids."""
        if self.ttl_seconds is None:
            return []
        cutoff = self._clock() - self.ttl_seconds
        with self._lock:
            expired = [sid for sid, record in self._sessions.items() if record.updated_at < cutoff]
            for sid in expired:
                del self._sessions[sid]
        if expired:
            logger.info("Evicted expired progress sessions", count=len(expired))
        return expired

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __bool__(self) -> bool:
        # An empty store is still a store
        return True

    def reporter(self, session_id: str) -> ProgressCallback:
        """Build the milestone callback handed to extractors."""

        def on_progress(progress: float, message: str) -> None:
            self.update(
                session_id,
                progress=round(progress),
                message=message,
                status=AnalysisStatus.PROCESSING,
            )

        return on_progress


def format_sse(payload: dict[str, Any]) -> str:
    """Encode one Server-Sent-Events data frame."""
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


async def stream_progress(
    store: ProgressStore,
    session_id: str,
    poll_interval: float = 0.5,
    linger: float = 1.0,
) -> AsyncIterator[str]:
    """Poll a session and yield SSE frames until it reaches a terminal state.

    The session is deleted ``linger`` seconds after the terminal frame.
    """
    while True:
        record = store.get(session_id)
        if record is None:
            yield format_sse({"error": "Session not found"})
            return

        yield format_sse(record.to_dict())

        if record.status.is_terminal:
            await asyncio.sleep(linger)
            store.delete(session_id)
            logger.debug("Progress session consumed", session_id=session_id, status=record.status.value)
            return

        await asyncio.sleep(poll_interval)
