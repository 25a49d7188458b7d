"""Deck-wide repetitive content detection and filtering.

Headers, footers, page numbers and logos that come from the deck template show
up on most slides. They are detected by exact-match frequency across slides:

1. Split each slide's raw text into trimmed lines, keep lines of
   ``min_length``..``max_length`` characters, count each line once per slide.
2. Flag a line when it appears on at least ``ceil(n * min_fraction)`` slides, or
   when it matches a boilerplate pattern and appears on at least
   ``ceil(n * pattern_fraction)`` slides.
3. Flag an image filename when it appears on at least ``ceil(n * min_fraction)``
   slides.

Per-slide varying boilerplate ("Page 1", "Page 2", ...) is not caught: every
literal line is distinct.
"""

import math
import re
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field, replace

import structlog

from webinar_platform.ingestion.content import build_slide_document
from webinar_platform.ingestion.models import RepetitiveContentConfig, Slide

logger = structlog.get_logger(__name__)

_MONTHS = (
    "jan|feb|mär|mar|apr|mai|may|jun|jul|aug|sep|okt|oct|nov|dez|dec"
)

BOILERPLATE_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Pure page numbers
    re.compile(r"^\d+$"),
    # "Page 3", "Seite 3", "Page 3 of 10", "Seite 3 von 10"
    re.compile(r"^(page|seite|folie|slide)\s*\d+(\s*(of|von|/)\s*\d+)?$", re.IGNORECASE),
    # "3/10", "3 / 10"
    re.compile(r"^\d+\s*/\s*\d+$"),
    # Copyright lines with a year
    re.compile(r"(©|\(c\)|copyright).*\b(19|20)\d{2}\b", re.IGNORECASE),
    re.compile(r"\b(19|20)\d{2}\b.*(©|\(c\)|copyright)", re.IGNORECASE),
    # 17.10.2026, 17/10/26, 17-10-2026
    re.compile(r"^\d{1,2}[./-]\d{1,2}[./-]\d{2,4}$"),
    # 2026-10-17
    re.compile(r"^\d{4}-\d{2}-\d{2}$"),
    # 17. Oktober 2026, 17 Oct 2026
    re.compile(rf"^\d{{1,2}}\.?\s*({_MONTHS})[a-zäöü]*\.?\s+\d{{4}}$", re.IGNORECASE),
    # October 17, 2026
    re.compile(rf"^({_MONTHS})[a-zäöü]*\.?\s+\d{{1,2}},?\s+\d{{4}}$", re.IGNORECASE),
)


def is_boilerplate(line: str) -> bool:
    """Check whether a trimmed line looks like template furniture."""
    return any(pattern.search(line) for pattern in BOILERPLATE_PATTERNS)


def occurrence_threshold(slide_count: int, fraction: float) -> int:
    """Minimum number of slides a candidate must appear on.

    The product is rounded before ``ceil`` so that float noise
    (``10 * 0.3 == 3.0000000000000004``) does not bump the threshold.
    """
    return math.ceil(round(slide_count * fraction, 9))


@dataclass
class RepetitionReport:
    """Outcome of one detection pass over a deck."""

    slide_count: int = 0
    text_threshold: int = 0
    pattern_threshold: int = 0
    repetitive_texts: set[str] = field(default_factory=set)
    repetitive_images: set[str] = field(default_factory=set)
    flagged_by_frequency: set[str] = field(default_factory=set)
    flagged_by_pattern: set[str] = field(default_factory=set)

    @property
    def is_empty(self) -> bool:
        return not self.repetitive_texts and not self.repetitive_images


class RepetitiveContentDetector:
    """Detect and strip text lines and images that recur across a deck.

    Usage:
        detector = RepetitiveContentDetector(RepetitiveContentConfig())
        filtered = detector.filter(slides)
    """

    def __init__(self, config: RepetitiveContentConfig | None = None):
        """Initialize detector.

        Args:
            config: Thresholds and line-length bounds. Defaults apply when omitted.
        """
        self.config = config or RepetitiveContentConfig()

    def candidate_lines(self, text: str) -> set[str]:
        """Distinct trimmed lines of one slide that are eligible for counting."""
        if not text:
            return set()
        lines = set()
        for raw_line in text.splitlines():
            line = raw_line.strip()
            if self.config.min_length <= len(line) <= self.config.max_length:
                lines.add(line)
        return lines

    def analyze(self, slides: Sequence[Slide]) -> RepetitionReport:
        """Run text and image detection over the full slide set."""
        slide_count = len(slides)
        report = RepetitionReport(slide_count=slide_count)
        if slide_count < 2:
            return report

        report.text_threshold = occurrence_threshold(slide_count, self.config.min_fraction)
        report.pattern_threshold = occurrence_threshold(slide_count, self.config.pattern_fraction)

        line_counts: Counter[str] = Counter()
        for slide in slides:
            line_counts.update(self.candidate_lines(slide.speaker_note))

        for line, count in line_counts.items():
            if count >= report.text_threshold:
                report.flagged_by_frequency.add(line)
            elif count >= report.pattern_threshold and is_boilerplate(line):
                report.flagged_by_pattern.add(line)
        report.repetitive_texts = report.flagged_by_frequency | report.flagged_by_pattern

        image_counts: Counter[str] = Counter()
        for slide in slides:
            image_counts.update({image.filename for image in slide.images})

        report.repetitive_images = {
            filename for filename, count in image_counts.items() if count >= report.text_threshold
        }
        return report

    def detect_text(self, slides: Sequence[Slide]) -> set[str]:
        return self.analyze(slides).repetitive_texts

    def detect_images(self, slides: Sequence[Slide]) -> set[str]:
        return self.analyze(slides).repetitive_images

    def filter(self, slides: Sequence[Slide]) -> list[Slide]:
        """Return new slides with repetitive lines and images removed.

        Fewer than two slides, or a deck with nothing flagged, are returned
        unchanged. Otherwise every slide gets its content document rebuilt from
        the remaining text and images, so the deck keeps a single layout.
        """
        if len(slides) < 2:
            return list(slides)

        report = self.analyze(slides)

        logger.info(
            "Repetitive content detected",
            slide_count=report.slide_count,
            text_threshold=report.text_threshold,
            pattern_threshold=report.pattern_threshold,
            by_frequency=len(report.flagged_by_frequency),
            by_pattern=len(report.flagged_by_pattern),
            images=len(report.repetitive_images),
        )

        if report.is_empty:
            return list(slides)

        return [self._filter_slide(slide, report) for slide in slides]

    def _filter_slide(self, slide: Slide, report: RepetitionReport) -> Slide:
        lines = slide.speaker_note.splitlines() if slide.speaker_note else []
        kept_lines = [line for line in lines if line.strip() not in report.repetitive_texts]
        kept_images = [image for image in slide.images if image.filename not in report.repetitive_images]

        text = "\n".join(kept_lines)
        return replace(
            slide,
            speaker_note=text,
            images=kept_images,
            content=build_slide_document(text, kept_images),
        )


def detect_repetitive_text(
    slides: Sequence[Slide], config: RepetitiveContentConfig | None = None
) -> set[str]:
    """Lines judged deck-wide furniture. Empty for fewer than two slides."""
    return RepetitiveContentDetector(config).detect_text(slides)


def detect_repetitive_images(
    slides: Sequence[Slide], config: RepetitiveContentConfig | None = None
) -> set[str]:
    """Image filenames judged deck-wide furniture. Empty for fewer than two slides."""
    return RepetitiveContentDetector(config).detect_images(slides)


def filter_repetitive_content(
    slides: Sequence[Slide], config: RepetitiveContentConfig | None = None
) -> list[Slide]:
    """Strip deck-wide furniture from every slide. See RepetitiveContentDetector.filter."""
    return RepetitiveContentDetector(config).filter(slides)
