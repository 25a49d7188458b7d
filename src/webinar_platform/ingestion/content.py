"""Builders for structured slide content documents.

A content document is a JSON-compatible node tree shared by imported and
manually authored slides::

    {"type": "doc", "content": [
        {"type": "heading", "attrs": {"level": 3}, "content": [{"type": "text", "text": "..."}]},
        {"type": "paragraph", "content": [{"type": "text", "text": "..."}]},
        {"type": "image", "attrs": {"src": "/uploads/...", "alt": "...", "size": "medium"}},
    ]}
"""

import re
from collections.abc import Iterator, Sequence
from typing import Any

from webinar_platform.ingestion.models import ImageRef, StructuredDocument

HEADING_MAX_LENGTH = 100
HEADING_LEVEL = 3
DEFAULT_IMAGE_SIZE = "medium"
IMAGE_SIZES = ("small", "medium", "large", "full")

MISSING_PAGE_IMAGES_HINT = (
    "Hinweis: PDF-Bilder konnten nicht extrahiert werden. Bitte stellen Sie sicher, "
    "dass pdftoppm (poppler-utils) installiert ist."
)


def text_node(text: str, marks: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    node: dict[str, Any] = {"type": "text", "text": text}
    if marks:
        node["marks"] = marks
    return node


def heading_node(text: str, level: int = HEADING_LEVEL) -> dict[str, Any]:
    return {"type": "heading", "attrs": {"level": level}, "content": [text_node(text)]}


def paragraph_node(text: str, marks: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    if not text:
        return {"type": "paragraph"}
    return {"type": "paragraph", "content": [text_node(text, marks)]}


def image_node(src: str, alt: str = "Slide Image", size: str = DEFAULT_IMAGE_SIZE) -> dict[str, Any]:
    return {"type": "image", "attrs": {"src": src, "alt": alt, "size": size}}


def document(nodes: Sequence[dict[str, Any]]) -> StructuredDocument:
    return {"type": "doc", "content": list(nodes)}


def split_paragraphs(text: str) -> list[str]:
    """Split raw text on line breaks into non-blank, trimmed paragraphs."""
    if not text:
        return []
    return [part.strip() for part in re.split(r"\n+", text) if part.strip()]


def build_slide_document(text: str, images: Sequence[ImageRef]) -> StructuredDocument:
    """Build a slide's content document from its raw text and images.

    The first paragraph becomes a heading when it is shorter than
    HEADING_MAX_LENGTH characters; every image becomes a medium-sized image node.
    """
    nodes: list[dict[str, Any]] = []

    paragraphs = split_paragraphs(text)
    if paragraphs and len(paragraphs[0]) < HEADING_MAX_LENGTH:
        nodes.append(heading_node(paragraphs.pop(0)))
    nodes.extend(paragraph_node(p) for p in paragraphs)

    nodes.extend(image_node(image.public_path) for image in images)

    return document(nodes)


def build_page_document(
    text: str,
    image: ImageRef | None,
    images_available: bool,
    preview_length: int = 500,
) -> StructuredDocument:
    """Build the content document for one rendered PDF page.

    Args:
        text: Approximate page text.
        image: Rendered page image, if rasterization produced one.
        images_available: Whether any page of the deck could be rendered.
        preview_length: Characters of text shown when there is no image.
    """
    if image is not None:
        alt = f"Seite {image.page_number}" if image.page_number else "Slide Image"
        return document([image_node(image.public_path, alt=alt, size="full")])

    nodes = [paragraph_node(text.strip()[:preview_length])]
    if not images_available:
        nodes.append(paragraph_node(MISSING_PAGE_IMAGES_HINT, marks=[{"type": "italic"}]))
    return document(nodes)


def iter_nodes(doc: StructuredDocument) -> Iterator[dict[str, Any]]:
    """Walk a content document depth-first in document order."""
    if not isinstance(doc, dict):
        return
    yield doc
    for child in doc.get("content") or []:
        yield from iter_nodes(child)


def document_text(doc: StructuredDocument) -> str:
    """Plain text of all block nodes, one line per block."""
    lines = []
    for node in iter_nodes(doc):
        if node.get("type") in ("heading", "paragraph"):
            line = "".join(
                child.get("text", "") for child in node.get("content") or [] if child.get("type") == "text"
            )
            if line:
                lines.append(line)
    return "\n".join(lines)


def document_image_sources(doc: StructuredDocument) -> list[str]:
    return [
        node["attrs"]["src"]
        for node in iter_nodes(doc)
        if node.get("type") == "image" and node.get("attrs", {}).get("src")
    ]
