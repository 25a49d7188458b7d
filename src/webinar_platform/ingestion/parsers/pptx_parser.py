"""PowerPoint parser reading slide XML through python-pptx."""

import asyncio
import posixpath
import re
from pathlib import Path

import structlog
from pptx import Presentation
from pptx.oxml.ns import qn

from webinar_platform.errors import PresentationParseError
from webinar_platform.ingestion.content import build_slide_document
from webinar_platform.ingestion.models import DocumentType, ImageRef, Slide
from webinar_platform.ingestion.parsers.base_parser import BaseParser
from webinar_platform.ingestion.progress import ProgressCallback

logger = structlog.get_logger(__name__)

MEDIA_PREFIX = "/ppt/media/"
MEDIA_EXTENSIONS = re.compile(r"\.(png|jpe?g|gif|svg)$", re.IGNORECASE)
SLIDE_PARTNAME = re.compile(r"/ppt/slides/slide(\d+)\.xml$")

_TEXT_RUN = qn("a:t")
_PARAGRAPH = qn("a:p")
_EMBED = qn("r:embed")


class PPTXParser(BaseParser):
    """Extract slide text and embedded images from a PPTX container.

    - Slides are ordered by the number in their part name (slide2 before slide10).
    - Text runs are joined with spaces in document order; with
      ``paragraph_breaks`` each paragraph goes on its own line instead.
    - Every media image is written once per deck and linked into the slides
      that reference it.
    """

    supported_types = [DocumentType.PPTX]

    def __init__(self, paragraph_breaks: bool = False):
        """Initialize PPTX parser.

        Args:
            paragraph_breaks: Join paragraphs with newlines instead of spaces.
        """
        self.paragraph_breaks = paragraph_breaks

    async def parse(
        self,
        file_path: Path,
        media_dir: Path,
        public_prefix: str,
        on_progress: ProgressCallback | None = None,
    ) -> list[Slide]:
        return await asyncio.to_thread(self.extract, file_path, media_dir, public_prefix, on_progress)

    def extract(
        self,
        file_path: Path,
        media_dir: Path,
        public_prefix: str,
        on_progress: ProgressCallback | None = None,
    ) -> list[Slide]:
        """Blocking extraction; see ``parse``."""
        self.log_parsing_start(file_path)
        report = self.report(on_progress)

        try:
            prs = Presentation(str(file_path))
        except Exception as e:
            self.log_parsing_error(file_path, e)
            raise PresentationParseError(f"Failed to open PowerPoint: {e}") from e

        report(10, "PPTX-Datei geladen, analysiere Folien...")

        try:
            media = self._extract_media(prs, media_dir, public_prefix)
        except OSError as e:
            self.log_parsing_error(file_path, e)
            raise PresentationParseError(f"Failed to write slide images: {e}") from e
        report(30, f"{len(media)} Bilder extrahiert...")

        slides_in_order = sorted(prs.slides, key=self._slide_index)
        total = len(slides_in_order)
        report(40, f"{total} Folien gefunden...")

        slides: list[Slide] = []
        for position, pptx_slide in enumerate(slides_in_order, 1):
            text = self.extract_text(pptx_slide.element)
            images = [
                media[name]
                for name in self._referenced_media(pptx_slide)
                if name in media
            ]

            slides.append(
                Slide(
                    title=f"Folie {position}",
                    content=build_slide_document(text, images),
                    speaker_note=text,
                    images=images,
                )
            )
            report(40 + 50 * position / total, f"Folie {position}/{total} verarbeitet...")

        report(95, "Analyse abgeschlossen...")
        self.log_parsing_complete(file_path, slides)
        return slides

    def extract_text(self, slide_element) -> str:
        """Collect ``a:t`` run text from a slide element in document order."""
        if not self.paragraph_breaks:
            runs = (run.text for run in slide_element.iter(_TEXT_RUN))
            return " ".join(run for run in runs if run).strip()

        lines = []
        for paragraph in slide_element.iter(_PARAGRAPH):
            runs = (run.text for run in paragraph.iter(_TEXT_RUN))
            line = " ".join(run for run in runs if run).strip()
            if line:
                lines.append(line)
        return "\n".join(lines)

    @staticmethod
    def _slide_index(pptx_slide) -> int:
        match = SLIDE_PARTNAME.search(str(pptx_slide.part.partname))
        return int(match.group(1)) if match else 0

    def _extract_media(self, prs, media_dir: Path, public_prefix: str) -> dict[str, ImageRef]:
        """Write every image part of the package to ``media_dir`` once.

        Returns:
            Mapping of media filename to its published ImageRef.
        """
        media_dir.mkdir(parents=True, exist_ok=True)
        media: dict[str, ImageRef] = {}

        for part in prs.part.package.iter_parts():
            partname = str(part.partname)
            if not partname.startswith(MEDIA_PREFIX) or not MEDIA_EXTENSIONS.search(partname):
                continue

            filename = posixpath.basename(partname)
            if filename in media:
                continue

            (media_dir / filename).write_bytes(part.blob)
            media[filename] = ImageRef(
                filename=filename,
                original_path=partname.lstrip("/"),
                public_path=self.public_path(public_prefix, filename),
            )

        logger.debug("Extracted deck media", count=len(media), media_dir=str(media_dir))
        return media

    @staticmethod
    def _referenced_media(pptx_slide) -> list[str]:
        """Media filenames a slide embeds, resolved through its relationships."""
        rels = pptx_slide.part.rels
        names = []

        for element in pptx_slide.element.iter():
            rel_id = element.get(_EMBED)
            if not rel_id or rel_id not in rels:
                continue

            rel = rels[rel_id]
            if rel.is_external:
                continue
            names.append(posixpath.basename(str(rel.target_part.partname)))

        return names
