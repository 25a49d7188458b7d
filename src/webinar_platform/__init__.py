"""Webinar platform: slide-deck import, narration and learning control."""

__version__ = "0.1.0"
