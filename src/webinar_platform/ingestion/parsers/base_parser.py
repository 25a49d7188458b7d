"""Base parser interface for slide-deck containers."""

from abc import ABC, abstractmethod
from pathlib import Path

import structlog

from webinar_platform.ingestion.models import DocumentType, Slide
from webinar_platform.ingestion.progress import ProgressCallback

logger = structlog.get_logger(__name__)


def _ignore_progress(progress: float, message: str) -> None:
    pass


class BaseParser(ABC):
    """Abstract base class for deck parsers.

    Parsers turn a container file into the initial, unfiltered slide list.
    Images are written into ``media_dir`` and published under ``public_prefix``.
    """

    supported_types: list[DocumentType] = []

    def can_parse(self, file_path: str | Path) -> bool:
        """Check if this parser can handle the given file."""
        return DocumentType.from_extension(Path(file_path).suffix) in self.supported_types

    @staticmethod
    def public_path(public_prefix: str, filename: str) -> str:
        return f"{public_prefix.rstrip('/')}/{filename}"

    @staticmethod
    def report(on_progress: ProgressCallback | None) -> ProgressCallback:
        return on_progress or _ignore_progress

    def log_parsing_start(self, file_path: str | Path) -> None:
        """Log the start of parsing."""
        logger.info(
            "Starting deck parsing",
            file_path=str(file_path),
            parser=self.__class__.__name__,
        )

    def log_parsing_complete(self, file_path: str | Path, slides: list[Slide]) -> None:
        """Log parsing completion."""
        logger.info(
            "Deck parsing complete",
            file_path=str(file_path),
            parser=self.__class__.__name__,
            slide_count=len(slides),
            image_count=sum(len(slide.images) for slide in slides),
        )

    def log_parsing_error(self, file_path: str | Path, error: Exception) -> None:
        """Log parsing error."""
        logger.error(
            "Deck parsing failed",
            file_path=str(file_path),
            parser=self.__class__.__name__,
            error=str(error),
            exc_info=True,
        )

    @abstractmethod
    async def parse(
        self,
        file_path: Path,
        media_dir: Path,
        public_prefix: str,
        on_progress: ProgressCallback | None = None,
    ) -> list[Slide]:
        """Parse a deck into slides.

        Args:
            file_path: Path to the deck.
            media_dir: Directory receiving extracted images.
            public_prefix: URL prefix for ``media_dir``.
            on_progress: Milestone callback ``(percent, message)``.

        Returns:
            Slides in deck order.

        Raises:
            PresentationParseError: The container could not be opened or parsed.
        """
