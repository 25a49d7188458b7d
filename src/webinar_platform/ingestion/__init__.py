"""Presentation import pipeline: extraction, repetitive-content filtering, progress."""

from webinar_platform.ingestion.analyzer import SlideAnalyzer
from webinar_platform.ingestion.models import (
    DocumentType,
    ImageRef,
    RepetitiveContentConfig,
    Slide,
    StructuredDocument,
)
from webinar_platform.ingestion.progress import (
    AnalysisProgress,
    AnalysisStatus,
    ProgressStore,
    stream_progress,
)
from webinar_platform.ingestion.repetition import (
    RepetitiveContentDetector,
    detect_repetitive_images,
    detect_repetitive_text,
    filter_repetitive_content,
)

__all__ = [
    "SlideAnalyzer",
    "DocumentType",
    "ImageRef",
    "RepetitiveContentConfig",
    "Slide",
    "StructuredDocument",
    "AnalysisProgress",
    "AnalysisStatus",
    "ProgressStore",
    "stream_progress",
    "RepetitiveContentDetector",
    "detect_repetitive_text",
    "detect_repetitive_images",
    "filter_repetitive_content",
]
