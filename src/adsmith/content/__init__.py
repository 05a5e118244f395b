"""Block content model: parse, render, and sanitize inline HTML."""

from adsmith.content.nodes import Document, Element, Image, Link, Node, NodePath, TextRun
from adsmith.content.parser import parse_html
from adsmith.content.renderer import offset_of, position_at, render_html, render_with_spans
from adsmith.content.sanitize import sanitize_document, sanitize_html

__all__ = [
    "Document",
    "Element",
    "Image",
    "Link",
    "Node",
    "NodePath",
    "TextRun",
    "offset_of",
    "parse_html",
    "position_at",
    "render_html",
    "render_with_spans",
    "sanitize_document",
    "sanitize_html",
]
