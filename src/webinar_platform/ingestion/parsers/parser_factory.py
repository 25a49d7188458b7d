"""Parser factory for routing decks to the appropriate parser."""

from pathlib import Path

import structlog

from webinar_platform.config.settings import AnalysisSettings, ToolSettings
from webinar_platform.errors import UnsupportedFormatError
from webinar_platform.ingestion.models import DocumentType
from webinar_platform.ingestion.parsers.base_parser import BaseParser
from webinar_platform.ingestion.parsers.pdf_parser import PDFParser
from webinar_platform.ingestion.parsers.pptx_parser import PPTXParser

logger = structlog.get_logger(__name__)

SUPPORTED_EXTENSIONS = (".pptx", ".ppt", ".pdf")


class ParserFactory:
    """Factory for creating and managing deck parsers.

    Routes decks to the appropriate parser based on file extension.
    """

    def __init__(
        self,
        analysis: AnalysisSettings | None = None,
        tools: ToolSettings | None = None,
    ):
        """Initialize parser factory.

        Args:
            analysis: Import settings (PPTX paragraph handling, PDF preview length).
            tools: External tool binaries and timeouts.
        """
        analysis = analysis or AnalysisSettings()
        tools = tools or ToolSettings()

        self._parsers: dict[DocumentType, BaseParser] = {
            DocumentType.PPTX: PPTXParser(paragraph_breaks=analysis.pptx_paragraph_breaks),
            DocumentType.PDF: PDFParser(
                pdftoppm_binary=tools.pdftoppm_binary,
                rasterize_timeout=tools.rasterize_timeout,
                text_preview_length=analysis.pdf_text_preview_length,
            ),
        }

    def get_parser(self, file_path: str | Path) -> BaseParser:
        """Get appropriate parser for file.

        Raises:
            UnsupportedFormatError: No parser handles the extension.
        """
        path = Path(file_path)
        doc_type = DocumentType.from_extension(path.suffix)

        parser = self._parsers.get(doc_type)
        if parser is None:
            logger.warning("No parser available for file type", suffix=path.suffix)
            raise UnsupportedFormatError(f"Unsupported presentation format: {path.suffix or path.name}")

        return parser

    @staticmethod
    def is_supported(file_path: str | Path) -> bool:
        return Path(file_path).suffix.lower() in SUPPORTED_EXTENSIONS

    @staticmethod
    def discover_decks(directory: str | Path) -> list[Path]:
        """List uploaded decks in a directory, sorted by name."""
        dir_path = Path(directory)
        if not dir_path.is_dir():
            return []
        return sorted(p for p in dir_path.iterdir() if p.is_file() and ParserFactory.is_supported(p))
