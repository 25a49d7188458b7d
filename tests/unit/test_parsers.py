"""Unit tests for the PPTX and PDF parsers."""

import asyncio
from types import SimpleNamespace

import pytest

from webinar_platform.errors import PresentationParseError, UnsupportedFormatError
from webinar_platform.ingestion.content import MISSING_PAGE_IMAGES_HINT, document_text
from webinar_platform.ingestion.models import ImageRef
from webinar_platform.ingestion.parsers import ParserFactory, PDFParser, PPTXParser, split_text_into_pages
from webinar_platform.ingestion.parsers import pdf_parser


class ProgressRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, progress, message):
        self.calls.append((progress, message))

    @property
    def values(self):
        return [progress for progress, _ in self.calls]


class TestPPTXParser:
    """Tests for PPTXParser."""

    def test_extracts_text_and_titles(self, pptx_file, tmp_path):
        """Runs are joined with spaces; slides are titled 'Folie N'."""
        slides = asyncio.run(PPTXParser().parse(pptx_file, tmp_path / "media", "/uploads/w1"))

        assert [slide.title for slide in slides] == ["Folie 1", "Folie 2", "Folie 3"]
        assert slides[0].speaker_note == "Titel 1 Inhalt 1"
        assert slides[0].content["content"][0]["type"] == "heading"

    def test_paragraph_breaks(self, pptx_file, tmp_path):
        """With paragraph breaks every paragraph is its own line."""
        slides = PPTXParser(paragraph_breaks=True).extract(pptx_file, tmp_path / "media", "/uploads/w1")

        assert slides[1].speaker_note == "Titel 2\nInhalt 2"

    def test_shared_media_written_once(self, pptx_file, tmp_path):
        """An image used on every slide is one file linked from each slide."""
        media_dir = tmp_path / "media"

        slides = PPTXParser().extract(pptx_file, media_dir, "/uploads/w1")

        logo_names = {slides[n].images[0].filename for n in range(3)}
        assert len(logo_names) == 1
        assert len(slides[0].images) == 1
        assert len(slides[1].images) == 2

        referenced = {image.filename for slide in slides for image in slide.images}
        written = {path.name for path in media_dir.iterdir()}
        assert referenced <= written
        assert len(referenced) == 2

        logo = slides[0].images[0]
        assert logo.public_path == f"/uploads/w1/{logo.filename}"
        assert logo.original_path == f"ppt/media/{logo.filename}"

    def test_slide_order_past_nine(self, tmp_path):
        """Slide 10 follows slide 9."""
        from pptx import Presentation

        prs = Presentation()
        for n in range(1, 12):
            slide = prs.slides.add_slide(prs.slide_layouts[5])  # title only
            slide.shapes.title.text = f"Nummer {n}"
        path = tmp_path / "many.pptx"
        prs.save(str(path))

        slides = PPTXParser().extract(path, tmp_path / "media", "/uploads/w1")

        assert [slide.speaker_note for slide in slides] == [f"Nummer {n}" for n in range(1, 12)]

    def test_slide_index_is_numeric(self):
        """Part names sort by number, not lexically."""
        def fake(name):
            return SimpleNamespace(part=SimpleNamespace(partname=name))

        names = ["/ppt/slides/slide10.xml", "/ppt/slides/slide2.xml", "/ppt/slides/slide1.xml"]
        ordered = sorted((fake(n) for n in names), key=PPTXParser._slide_index)

        assert [str(s.part.partname) for s in ordered] == [
            "/ppt/slides/slide1.xml",
            "/ppt/slides/slide2.xml",
            "/ppt/slides/slide10.xml",
        ]

    def test_progress_milestones(self, pptx_file, tmp_path):
        """Progress runs from 10 to 95 and never goes backwards."""
        recorder = ProgressRecorder()

        PPTXParser().extract(pptx_file, tmp_path / "media", "/uploads/w1", on_progress=recorder)

        assert recorder.values[:3] == [10, 30, 40]
        assert recorder.values[-1] == 95
        assert recorder.values == sorted(recorder.values)
        assert recorder.calls[-1][1] == "Analyse abgeschlossen..."

    def test_corrupt_file(self, tmp_path):
        """A file that is not a ZIP container fails the parse."""
        path = tmp_path / "broken.pptx"
        path.write_bytes(b"definitely not a zip")

        with pytest.raises(PresentationParseError):
            PPTXParser().extract(path, tmp_path / "media", "/uploads/w1")

    def test_unwritable_media_dir(self, pptx_file, tmp_path):
        """Failing to write slide images is reported as a parse failure."""
        blocked = tmp_path / "media"
        blocked.write_text("a file where the media directory should be")

        with pytest.raises(PresentationParseError, match="slide images"):
            PPTXParser().extract(pptx_file, blocked, "/uploads/w1")


class TestSplitTextIntoPages:
    """Tests for the line-chunk page split."""

    def test_even_chunks(self):
        assert split_text_into_pages("a\nb\nc\nd\ne", 2) == ["a\nb\nc", "d\ne"]

    def test_trailing_pages_empty(self):
        """More pages than lines leave the last pages empty."""
        assert split_text_into_pages("a\nb", 3) == ["a", "b", ""]

    def test_no_text_or_pages(self):
        assert split_text_into_pages("", 3) == []
        assert split_text_into_pages("text", 0) == []


class TestPDFParser:
    """Tests for PDFParser with page rendering stubbed."""

    def test_reads_pages(self, pdf_file):
        """Page count and text come from PyMuPDF."""
        pdf = PDFParser().read_text(pdf_file)

        assert pdf.num_pages == 2
        assert "Seiteninhalt 1" in pdf.text
        assert "Seiteninhalt 2" in pdf.text

    def test_page_images(self, pdf_file, tmp_path, monkeypatch):
        """Rendered pages become full-size image slides titled 'Seite N'."""
        async def fake_rasterize(pdf_path, output_dir, public_prefix, timeout, binary):
            return [
                ImageRef(f"page-{n}.png", str(output_dir / f"page-{n}.png"), f"{public_prefix}/page-{n}.png", n)
                for n in (1, 2)
            ]

        monkeypatch.setattr(pdf_parser, "rasterize_pdf", fake_rasterize)
        recorder = ProgressRecorder()

        slides = asyncio.run(PDFParser().parse(pdf_file, tmp_path / "media", "/uploads/w1", recorder))

        assert [slide.title for slide in slides] == ["Seite 1", "Seite 2"]
        assert slides[0].images[0].filename == "page-1.png"
        image_node = slides[1].content["content"][0]
        assert image_node["attrs"] == {"src": "/uploads/w1/page-2.png", "alt": "Seite 2", "size": "full"}
        assert slides[0].speaker_note == "Seiteninhalt 1"
        assert recorder.values[:3] == [10, 30, 60]
        assert recorder.values[-1] == 95

    def test_rendering_failure_falls_back_to_text(self, pdf_file, tmp_path, monkeypatch):
        """Without page images each slide shows a text preview and a hint."""
        async def no_images(*args, **kwargs):
            return []

        monkeypatch.setattr(pdf_parser, "rasterize_pdf", no_images)

        slides = asyncio.run(PDFParser().parse(pdf_file, tmp_path / "media", "/uploads/w1"))

        assert len(slides) == 2
        assert slides[0].images == []
        text = document_text(slides[0].content)
        assert "Seiteninhalt 1" in text
        assert MISSING_PAGE_IMAGES_HINT in text

    def test_missing_single_page_image(self, pdf_file, tmp_path, monkeypatch):
        """A page without an image shows its text and no hint."""
        async def first_page_only(pdf_path, output_dir, public_prefix, timeout, binary):
            return [ImageRef("page-1.png", "x", f"{public_prefix}/page-1.png", 1)]

        monkeypatch.setattr(pdf_parser, "rasterize_pdf", first_page_only)

        slides = asyncio.run(PDFParser().parse(pdf_file, tmp_path / "media", "/uploads/w1"))

        assert slides[1].images == []
        assert MISSING_PAGE_IMAGES_HINT not in document_text(slides[1].content)

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"this is not a pdf document")

        with pytest.raises(PresentationParseError):
            PDFParser().read_text(path)


class TestParserFactory:
    """Tests for parser routing."""

    def test_routes_by_extension(self):
        factory = ParserFactory()

        assert isinstance(factory.get_parser("deck.pptx"), PPTXParser)
        assert isinstance(factory.get_parser("DECK.PDF"), PDFParser)

    def test_unsupported_extension(self):
        with pytest.raises(UnsupportedFormatError):
            ParserFactory().get_parser("notes.txt")

    def test_discover_decks(self, tmp_path):
        for name in ("b.pdf", "a.pptx", "c.txt"):
            (tmp_path / name).write_bytes(b"")

        assert [p.name for p in ParserFactory.discover_decks(tmp_path)] == ["a.pptx", "b.pdf"]
