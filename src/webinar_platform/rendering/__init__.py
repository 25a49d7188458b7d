"""HTML rendering of slide content and reveal.js presentations."""

from webinar_platform.rendering.document import render_document
from webinar_platform.rendering.reveal import (
    PRESENTATION_FILE,
    generate_presentation_html,
    generate_slide_html,
    write_presentation,
)

__all__ = [
    "render_document",
    "generate_slide_html",
    "generate_presentation_html",
    "write_presentation",
    "PRESENTATION_FILE",
]
