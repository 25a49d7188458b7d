"""Deck parsers for different container types."""

from webinar_platform.ingestion.parsers.base_parser import BaseParser
from webinar_platform.ingestion.parsers.parser_factory import ParserFactory
from webinar_platform.ingestion.parsers.pdf_parser import PDFParser, split_text_into_pages
from webinar_platform.ingestion.parsers.pptx_parser import PPTXParser

__all__ = [
    "BaseParser",
    "PDFParser",
    "PPTXParser",
    "ParserFactory",
    "split_text_into_pages",
]
