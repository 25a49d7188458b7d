"""Render structured slide content documents to HTML."""

import re
from html import escape
from typing import Any

import structlog

from webinar_platform.ingestion.content import IMAGE_SIZES
from webinar_platform.ingestion.models import StructuredDocument

logger = structlog.get_logger(__name__)

HEADING_LEVELS = (2, 3, 4, 5)

# Block nodes rendered as a plain wrapper tag with a class
_LAYOUT_NODES = {
    "column": ("div", "column"),
    "twoColumnBlock": ("div", "two-column-block"),
    "threeColumnBlock": ("div", "three-column-block"),
    "heroBlock": ("div", "hero-block"),
    "heroTitle": ("h1", "hero-title"),
    "heroSubtitle": ("p", "hero-subtitle"),
}

_SIMPLE_NODES = {
    "paragraph": "p",
    "bulletList": "ul",
    "orderedList": "ol",
    "listItem": "li",
    "blockquote": "blockquote",
    "tableRow": "tr",
    "tableCell": "td",
    "tableHeader": "th",
}

_MARK_TAGS = {
    "bold": "strong",
    "italic": "em",
    "underline": "u",
    "strike": "s",
    "code": "code",
}

# Link targets other than these schemes are dropped; relative URLs pass
LINK_SCHEMES = frozenset({"http", "https", "mailto"})

# Browsers ignore ASCII whitespace and control characters inside a scheme
_URL_NOISE = re.compile(r"[\x00-\x20\x7f]+")
_URL_SCHEME = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*):")


def render_document(content: StructuredDocument | str | None) -> str:
    """Render slide content to HTML.

    Legacy slides store HTML strings; those are passed through unchanged.
    """
    if not content:
        return ""
    if isinstance(content, str):
        return content
    try:
        return _render_node(content)
    except (KeyError, TypeError, AttributeError) as e:
        logger.warning("Failed to render slide content", error=str(e))
        return f'<p class="error">Fehler beim Rendern des Inhalts: {escape(str(e))}</p>'


def _render_children(node: dict[str, Any]) -> str:
    return "".join(_render_node(child) for child in node.get("content") or [])


def _attr(name: str, value: Any) -> str:
    return f' {name}="{escape(str(value), quote=True)}"'


def safe_href(href: Any) -> str | None:
    """Return the link target to render, or None when its scheme is not allowed."""
    target = str(href or "").strip()
    match = _URL_SCHEME.match(_URL_NOISE.sub("", target))
    if not target or (match and match.group(1).lower() not in LINK_SCHEMES):
        return None
    return target


def _render_node(node: dict[str, Any]) -> str:
    node_type = node.get("type")
    attrs = node.get("attrs") or {}

    if node_type == "doc":
        return _render_children(node)

    if node_type == "text":
        return _render_text(node)

    if node_type == "hardBreak":
        return "<br>"

    if node_type == "horizontalRule":
        return "<hr>"

    if node_type == "heading":
        level = attrs.get("level", 3)
        level = level if level in HEADING_LEVELS else 3
        return f"<h{level}>{_render_children(node)}</h{level}>"

    if node_type == "image":
        return _render_image(attrs)

    if node_type == "table":
        return f'<table class="tiptap-table"><tbody>{_render_children(node)}</tbody></table>'

    if node_type in _LAYOUT_NODES:
        tag, css_class = _LAYOUT_NODES[node_type]
        return f"<{tag}{_attr('class', css_class)}>{_render_children(node)}</{tag}>"

    if node_type in _SIMPLE_NODES:
        tag = _SIMPLE_NODES[node_type]
        align = attrs.get("textAlign")
        style = _attr("style", f"text-align: {align}") if align in ("center", "right", "justify") else ""
        return f"<{tag}{style}>{_render_children(node)}</{tag}>"

    logger.debug("Skipping unknown content node", node_type=node_type)
    return _render_children(node)


def _render_image(attrs: dict[str, Any]) -> str:
    src = attrs.get("src")
    if not src:
        return ""
    size = attrs.get("size") if attrs.get("size") in IMAGE_SIZES else "medium"
    classes = f"tiptap-image img-{size}"
    if attrs.get("float") in ("left", "right"):
        classes += f" img-float-{attrs['float']}"
    return f"<img{_attr('src', src)}{_attr('alt', attrs.get('alt') or '')}{_attr('class', classes)}>"


def _render_text(node: dict[str, Any]) -> str:
    html = escape(node.get("text", ""), quote=False)
    for mark in node.get("marks") or []:
        mark_type = mark.get("type")
        if mark_type in _MARK_TAGS:
            tag = _MARK_TAGS[mark_type]
            html = f"<{tag}>{html}</{tag}>"
        elif mark_type == "link":
            href = safe_href((mark.get("attrs") or {}).get("href"))
            if href is None:
                continue
            html = f'<a{_attr("href", href)} target="_blank" rel="noopener noreferrer">{html}</a>'
        elif mark_type == "textStyle":
            color = (mark.get("attrs") or {}).get("color")
            if color:
                html = f"<span{_attr('style', f'color: {color}')}>{html}</span>"
    return html
