"""Pytest configuration and fixtures."""

import base64
from pathlib import Path

import pytest

from webinar_platform.config.settings import Settings, StorageSettings
from webinar_platform.ingestion.models import ImageRef, Slide
from webinar_platform.ingestion.progress import ProgressStore

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def make_image(filename: str) -> ImageRef:
    return ImageRef(
        filename=filename,
        original_path=f"ppt/media/{filename}",
        public_path=f"/uploads/w1/{filename}",
    )


def make_slide(text: str, images: list[str] | None = None, title: str = "Folie") -> Slide:
    """Slide with raw text and image filenames, content left empty."""
    return Slide(
        title=title,
        content={"type": "doc", "content": []},
        speaker_note=text,
        images=[make_image(name) for name in images or []],
    )


@pytest.fixture
def slide_factory():
    """Build slides from raw text and image filenames."""
    return make_slide


@pytest.fixture
def png_bytes():
    """Smallest valid PNG image."""
    return PNG_BYTES


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with every storage directory under tmp_path."""
    return Settings(
        storage=StorageSettings(
            uploads_dir=tmp_path / "uploads",
            slides_dir=tmp_path / "slides",
            data_dir=tmp_path / "data",
        )
    )


@pytest.fixture
def progress_store():
    """Progress store without TTL eviction."""
    return ProgressStore(ttl_seconds=None)


@pytest.fixture
def sample_slides():
    """Ten slides with a confidential footer on eight and a logo on seven."""
    slides = []
    for n in range(1, 11):
        lines = [f"Topic {n}", f"Detail line for slide {n}"]
        if n <= 8:
            lines.append("Confidential - Internal Use")
        if n in (2, 5):
            lines.append("Shared remark")
        images = [f"chart{n}.png"]
        if n <= 7:
            images.insert(0, "logo.png")
        slides.append(make_slide("\n".join(lines), images, title=f"Folie {n}"))
    return slides


@pytest.fixture
def pptx_file(tmp_path: Path, png_bytes: bytes) -> Path:
    """Three-slide deck: the same logo on every slide, a chart on slide 2."""
    from pptx import Presentation
    from pptx.util import Inches

    image_dir = tmp_path / "images"
    image_dir.mkdir()
    logo = image_dir / "logo.png"
    logo.write_bytes(png_bytes)

    prs = Presentation()
    layout = prs.slide_layouts[1]  # title and content
    for n in range(1, 4):
        slide = prs.slides.add_slide(layout)
        slide.shapes.title.text = f"Titel {n}"
        slide.placeholders[1].text = f"Inhalt {n}"
        slide.shapes.add_picture(str(logo), Inches(0.2), Inches(0.2), Inches(0.5), Inches(0.5))
        if n == 2:
            chart = image_dir / "chart.png"
            # Different bytes so python-pptx stores a second media part
            chart.write_bytes(png_bytes + b"\x00")
            slide.shapes.add_picture(str(chart), Inches(2), Inches(2), Inches(1), Inches(1))

    uploads = tmp_path / "uploads"
    uploads.mkdir(exist_ok=True)
    path = uploads / "deck.pptx"
    prs.save(str(path))
    return path


@pytest.fixture
def pdf_file(tmp_path: Path) -> Path:
    """Two-page PDF with one text line per page."""
    import fitz

    doc = fitz.open()
    for n in range(1, 3):
        page = doc.new_page()
        page.insert_text((72, 72), f"Seiteninhalt {n}")
    uploads = tmp_path / "uploads"
    uploads.mkdir(exist_ok=True)
    path = uploads / "deck.pdf"
    doc.save(str(path))
    doc.close()
    return path
