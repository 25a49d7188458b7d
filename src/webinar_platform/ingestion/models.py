"""Data models for the presentation import pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from webinar_platform.config.settings import AnalysisSettings

# Renderer-agnostic node tree: {"type": "doc", "content": [...]}
StructuredDocument = dict[str, Any]


class DocumentType(Enum):
    """Supported slide-deck containers."""

    PDF = "pdf"
    PPTX = "pptx"
    UNKNOWN = "unknown"

    @classmethod
    def from_extension(cls, extension: str) -> "DocumentType":
        """Get document type from file extension."""
        ext_map = {
            ".pdf": cls.PDF,
            ".pptx": cls.PPTX,
            ".ppt": cls.PPTX,
        }
        return ext_map.get(extension.lower(), cls.UNKNOWN)


@dataclass(frozen=True)
class ImageRef:
    """An image extracted from a deck and published under the uploads directory.

    Identity is ``filename``.
    """

    filename: str
    original_path: str
    public_path: str
    page_number: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "filename": self.filename,
            "originalPath": self.original_path,
            "publicPath": self.public_path,
        }
        if self.page_number is not None:
            data["pageNumber"] = self.page_number
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ImageRef":
        return cls(
            filename=data["filename"],
            original_path=data.get("originalPath", ""),
            public_path=data.get("publicPath", ""),
            page_number=data.get("pageNumber"),
        )


@dataclass
class Slide:
    """One deck page/slide as stored with a webinar."""

    title: str
    content: StructuredDocument | str = field(default_factory=dict)
    speaker_note: str = ""  # raw extracted text, also used for narration
    images: list[ImageRef] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted camelCase form."""
        return {
            "title": self.title,
            "content": self.content,
            "speakerNote": self.speaker_note,
            "images": [image.to_dict() for image in self.images],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Slide":
        return cls(
            title=data.get("title", ""),
            content=data.get("content") or {},
            speaker_note=data.get("speakerNote", ""),
            images=[ImageRef.from_dict(image) for image in data.get("images", [])],
        )


@dataclass(frozen=True)
class RepetitiveContentConfig:
    """Tunables for deck-wide furniture detection."""

    min_fraction: float = 0.6
    pattern_fraction: float = 0.3
    min_length: int = 3
    max_length: int = 200

    @classmethod
    def from_settings(cls, settings: AnalysisSettings) -> "RepetitiveContentConfig":
        return cls(
            min_fraction=settings.min_fraction,
            pattern_fraction=settings.pattern_fraction,
            min_length=settings.min_length,
            max_length=settings.max_length,
        )
