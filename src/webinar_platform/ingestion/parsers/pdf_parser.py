"""PDF parser: text via PyMuPDF, page images via pdftoppm."""

import asyncio
import math
from dataclasses import dataclass
from pathlib import Path

import fitz  # PyMuPDF
import structlog

from webinar_platform.errors import PresentationParseError
from webinar_platform.ingestion.content import build_page_document
from webinar_platform.ingestion.models import DocumentType, Slide
from webinar_platform.ingestion.parsers.base_parser import BaseParser
from webinar_platform.ingestion.progress import ProgressCallback
from webinar_platform.ingestion.tools import rasterize_pdf

logger = structlog.get_logger(__name__)


@dataclass
class PDFText:
    """Page count and full text of a PDF."""

    num_pages: int
    text: str


def split_text_into_pages(text: str, num_pages: int) -> list[str]:
    """Approximate per-page text by cutting the line sequence into equal chunks.

    Chunk size is ``ceil(lines / num_pages)``; trailing pages may be empty.
    This does not follow real page boundaries.
    """
    if not text or num_pages <= 0:
        return []

    lines = text.split("\n")
    lines_per_page = math.ceil(len(lines) / num_pages)
    return [
        "\n".join(lines[i * lines_per_page : (i + 1) * lines_per_page])
        for i in range(num_pages)
    ]


class PDFParser(BaseParser):
    """Turn each PDF page into a slide showing the rendered page image.

    Strategy:
    1. Read page count and full text with PyMuPDF
    2. Render every page to PNG with pdftoppm
    3. Pair page N's image with the N-th text chunk

    When rendering fails the slides fall back to a text preview.
    """

    supported_types = [DocumentType.PDF]

    def __init__(
        self,
        pdftoppm_binary: str = "pdftoppm",
        rasterize_timeout: float = 120.0,
        text_preview_length: int = 500,
    ):
        """Initialize PDF parser.

        Args:
            pdftoppm_binary: pdftoppm executable.
            rasterize_timeout: Seconds before page rendering is abandoned.
            text_preview_length: Characters of text shown for pages without an image.
        """
        self.pdftoppm_binary = pdftoppm_binary
        self.rasterize_timeout = rasterize_timeout
        self.text_preview_length = text_preview_length

    def read_text(self, file_path: Path) -> PDFText:
        """Read page count and concatenated page text.

        Raises:
            PresentationParseError: The file is not a readable PDF.
        """
        try:
            with fitz.open(str(file_path)) as doc:
                num_pages = len(doc)
                text = "\n".join(page.get_text("text") for page in doc)
        except Exception as e:
            self.log_parsing_error(file_path, e)
            raise PresentationParseError(f"Failed to open PDF: {e}") from e

        return PDFText(num_pages=num_pages, text=text)

    async def parse(
        self,
        file_path: Path,
        media_dir: Path,
        public_prefix: str,
        on_progress: ProgressCallback | None = None,
    ) -> list[Slide]:
        self.log_parsing_start(file_path)
        report = self.report(on_progress)
        report(10, "PDF-Datei geladen...")

        pdf = await asyncio.to_thread(self.read_text, file_path)
        report(30, f"PDF analysiert: {pdf.num_pages} Seiten gefunden...")

        page_images = await rasterize_pdf(
            file_path,
            media_dir,
            public_prefix,
            timeout=self.rasterize_timeout,
            binary=self.pdftoppm_binary,
        )
        report(60, f"{len(page_images)} Seiten als Bilder extrahiert...")

        images_by_page = {image.page_number: image for image in page_images}
        text_pages = split_text_into_pages(pdf.text, pdf.num_pages)

        slides: list[Slide] = []
        for index in range(pdf.num_pages):
            page_number = index + 1
            page_text = text_pages[index] if index < len(text_pages) else ""
            page_image = images_by_page.get(page_number)

            slides.append(
                Slide(
                    title=f"Seite {page_number}",
                    content=build_page_document(
                        page_text,
                        page_image,
                        images_available=bool(page_images),
                        preview_length=self.text_preview_length,
                    ),
                    speaker_note=page_text.strip(),
                    images=[page_image] if page_image else [],
                )
            )
            report(60 + 30 * page_number / pdf.num_pages, f"Seite {page_number}/{pdf.num_pages} verarbeitet...")

        report(95, "PDF-Analyse abgeschlossen...")
        self.log_parsing_complete(file_path, slides)
        return slides
