"""Presentation analysis entry point: extract, detect, filter, report progress."""

from collections.abc import AsyncIterator
from pathlib import Path

import structlog

from webinar_platform.config.settings import Settings, get_settings
from webinar_platform.errors import PresentationError
from webinar_platform.ingestion.models import RepetitiveContentConfig, Slide
from webinar_platform.ingestion.parsers import ParserFactory
from webinar_platform.ingestion.progress import AnalysisStatus, ProgressStore, stream_progress
from webinar_platform.ingestion.repetition import RepetitiveContentDetector

logger = structlog.get_logger(__name__)


class SlideAnalyzer:
    """Turn an uploaded deck into filtered slides while reporting progress.

    Usage:
        store = ProgressStore()
        analyzer = SlideAnalyzer(settings, store)
        slides = await analyzer.analyze_presentation("deck.pptx", webinar_id, session_id)

    The terminal progress record (``completed`` with slides, or ``error``) is
    left in the store for the consumer to read and delete.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        progress_store: ProgressStore | None = None,
        parser_factory: ParserFactory | None = None,
    ):
        self.settings = settings if settings is not None else get_settings()
        if progress_store is None:
            progress_store = ProgressStore(ttl_seconds=self.settings.progress.ttl_seconds)
        self.progress = progress_store
        if parser_factory is None:
            parser_factory = ParserFactory(self.settings.analysis, self.settings.tools)
        self.parsers = parser_factory
        self.detector = RepetitiveContentDetector(
            RepetitiveContentConfig.from_settings(self.settings.analysis)
        )

    @property
    def uploads_dir(self) -> Path:
        return Path(self.settings.storage.uploads_dir)

    def resolve_upload(self, filename: str) -> Path:
        """Locate an uploaded deck, refusing names that escape the uploads directory."""
        uploads = self.uploads_dir.resolve()
        path = (uploads / filename).resolve()
        if path.parent != uploads:
            raise PresentationError(f"Invalid presentation filename: {filename}")
        return path

    def media_location(self, webinar_id: str) -> tuple[Path, str]:
        """Directory and public URL prefix for a webinar's extracted images."""
        media_dir = self.uploads_dir / webinar_id
        prefix = f"{self.settings.storage.public_uploads_prefix.rstrip('/')}/{webinar_id}"
        return media_dir, prefix

    def progress_events(self, session_id: str) -> AsyncIterator[str]:
        """SSE frames for a session, paced by the progress settings."""
        return stream_progress(
            self.progress,
            session_id,
            poll_interval=self.settings.progress.poll_interval,
            linger=self.settings.progress.linger,
        )

    async def analyze_presentation(self, filename: str, webinar_id: str, session_id: str) -> list[Slide]:
        """Analyze an uploaded PPTX/PDF deck.

        Args:
            filename: Deck filename inside the uploads directory.
            webinar_id: Webinar receiving the slides; images go to ``uploads/<webinar_id>/``.
            session_id: Progress session key.

        Returns:
            Slides in deck order with deck-wide furniture removed.

        Raises:
            PresentationError: The deck could not be located, recognized or parsed.
        """
        self.progress.create(session_id)
        log = logger.bind(session_id=session_id, webinar_id=webinar_id, filename=filename)
        log.info("Presentation analysis started")

        try:
            file_path = self.resolve_upload(filename)
            parser = self.parsers.get_parser(file_path)
            media_dir, public_prefix = self.media_location(webinar_id)

            slides = await parser.parse(
                file_path,
                media_dir,
                public_prefix,
                on_progress=self.progress.reporter(session_id),
            )

            if self.settings.analysis.filter_repetitive:
                slides = self.detector.filter(slides)

            self.progress.update(
                session_id,
                progress=100,
                status=AnalysisStatus.COMPLETED,
                message="Analyse erfolgreich abgeschlossen",
                slides=slides,
            )
            log.info("Presentation analysis completed", slide_count=len(slides))
            return slides

        except Exception as e:
            log.error("Presentation analysis failed", error=str(e), exc_info=True)
            self.progress.update(
                session_id,
                progress=0,
                status=AnalysisStatus.ERROR,
                message=str(e),
                error=str(e),
            )
            raise
