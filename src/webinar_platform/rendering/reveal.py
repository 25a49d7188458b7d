"""reveal.js presentations built from stored slides."""

import json
from collections.abc import Sequence
from html import escape
from pathlib import Path

import structlog

from webinar_platform.ingestion.models import Slide
from webinar_platform.rendering.document import render_document

logger = structlog.get_logger(__name__)

PRESENTATION_FILE = "presentation.html"
REVEAL_CDN = "https://cdn.jsdelivr.net/npm/reveal.js@4.5.0"

PRESENTATION_STYLES = """
    .reveal { font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; color: #333; }
    .reveal h2, .reveal h3 { color: #2c3e50; font-weight: 600; line-height: 1.3; }
    .reveal .slide-content { text-align: left; padding: 30px; max-width: 90%; margin: 0 auto; }
    .reveal section img { max-width: 100%; max-height: 60vh; object-fit: contain; margin: 1em auto; display: block; }
    .reveal img.img-small { max-width: 25%; height: auto; }
    .reveal img.img-medium { max-width: 50%; height: auto; }
    .reveal img.img-large { max-width: 75%; height: auto; }
    .reveal img.img-full { max-width: 100%; height: auto; }
    .reveal img.img-float-left { float: left; margin: 0 20px 20px 0; }
    .reveal img.img-float-right { float: right; margin: 0 0 20px 20px; }
    .reveal .two-column-block { display: grid; grid-template-columns: 1fr 1fr; gap: 20px; margin: 20px 0; }
    .reveal .three-column-block { display: grid; grid-template-columns: 1fr 1fr 1fr; gap: 20px; margin: 20px 0; }
    .reveal .column { padding: 10px; border: 1px solid #e0e0e0; border-radius: 4px; }
    .reveal .hero-block { text-align: center; padding: 60px 40px; margin: 30px 0; border-radius: 12px;
        background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; }
    .reveal .tiptap-table { width: 100%; border-collapse: collapse; margin: 20px 0; }
    .reveal .tiptap-table th, .reveal .tiptap-table td { border: 1px solid #ddd; padding: 12px; text-align: left; }
    .reveal .controls { display: none !important; }
    @media (max-width: 768px) {
      .reveal .two-column-block, .reveal .three-column-block { grid-template-columns: 1fr; }
    }
"""


def generate_slide_html(slide: Slide) -> str:
    """Render one slide as a reveal.js ``<section>``."""
    parts = ["<section>", '  <div class="slide-content">']
    if slide.title:
        parts.append(f"    <h2>{escape(slide.title)}</h2>")
    content = render_document(slide.content)
    if content:
        parts.append(f"    {content}")
    parts.append("  </div>")
    if slide.speaker_note:
        parts.append(f'  <aside class="notes">{escape(slide.speaker_note)}</aside>')
    parts.append("</section>")
    return "\n".join(parts)


def generate_presentation_html(slides: Sequence[Slide], title: str = "Webinar Präsentation") -> str:
    """Render a complete reveal.js document.

    The page exposes ``window.revealControl`` so the embedding player can step
    through slides and fetch each slide's narration text.
    """
    slides_html = "\n".join(generate_slide_html(slide) for slide in slides)
    # "</" would end the inline script early
    speaker_notes = json.dumps([slide.speaker_note or "" for slide in slides], ensure_ascii=False).replace(
        "</", "<\\/"
    )

    return f"""<!DOCTYPE html>
<html lang="de">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{escape(title)}</title>
  <link rel="stylesheet" href="{REVEAL_CDN}/dist/reveal.css">
  <link rel="stylesheet" href="{REVEAL_CDN}/dist/theme/white.css">
  <style>{PRESENTATION_STYLES}</style>
</head>
<body>
  <div class="reveal">
    <div class="slides">
{slides_html}
    </div>
  </div>
  <script src="{REVEAL_CDN}/dist/reveal.js"></script>
  <script>
    Reveal.initialize({{
      controls: false,
      progress: false,
      center: true,
      hash: false,
      transition: 'slide',
      backgroundTransition: 'none'
    }});

    const speakerNotes = {speaker_notes};

    window.revealControl = {{
      next: () => Reveal.next(),
      prev: () => Reveal.prev(),
      getCurrentSlide: () => Reveal.getState().indexh,
      getTotalSlides: () => Reveal.getTotalSlides(),
      getSpeakerNote: (index) => speakerNotes[index] || ''
    }};
  </script>
</body>
</html>
"""


def write_presentation(
    slides_dir: str | Path,
    webinar_id: str,
    slides: Sequence[Slide],
    title: str = "Webinar Präsentation",
) -> Path:
    """Write ``<slides_dir>/<webinar_id>/presentation.html``."""
    output_dir = Path(slides_dir) / webinar_id
    output_dir.mkdir(parents=True, exist_ok=True)

    path = output_dir / PRESENTATION_FILE
    path.write_text(generate_presentation_html(slides, title), encoding="utf-8")

    logger.info("Presentation written", webinar_id=webinar_id, slide_count=len(slides), path=str(path))
    return path
