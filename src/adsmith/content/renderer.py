"""Render the typed content tree back to HTML.

Rendering is deterministic: attributes keep their insertion order, text is
escaped except inside script and style, and void elements are written
without a closing tag. Rendering a freshly parsed document therefore
reproduces normalized input exactly.

render_with_spans() also returns where each node landed in the output so an
editor showing the markup can translate cursor offsets into tree positions.
"""

from bisect import bisect_right
from dataclasses import dataclass, field
from html import escape
from typing import Optional, Union

from adsmith.content.nodes import Document, Element, Image, Link, Node, NodePath, TextRun
from adsmith.models.selection import Position


VOID_TAGS = frozenset({"area", "br", "col", "embed", "hr", "img", "input", "source", "wbr"})
# Children are raw text: written as is, never escaped
RAW_TEXT_TAGS = frozenset({"script", "style"})


@dataclass
class SourceSpan:
    """Location of one rendered node in the HTML output.

    Attributes:
        path: Node path in the document
        start: Offset of the first character of the node's markup
        end: Offset just past the node's markup
        inner_start: Offset where the node's children begin (after the start tag)
        char_ends: For text runs, output offset (relative to start) after each
                   character; lets escaped text map back to character offsets
        is_image: True for image spans
    """

    path: NodePath
    start: int
    end: int
    inner_start: int
    is_text: bool = False
    char_ends: list[int] = field(default_factory=list)
    is_image: bool = False

    def text_offset(self, source_offset: int) -> int:
        """Character offset inside a text run for an output offset."""
        return bisect_right(self.char_ends, source_offset - self.start)

    def source_offset(self, text_offset: int) -> int:
        """Output offset for a character offset inside a text run."""
        if text_offset <= 0 or not self.char_ends:
            return self.start
        return self.start + self.char_ends[min(text_offset, len(self.char_ends)) - 1]


def escape_text(text: str) -> str:
    """Escape text for HTML output, writing non-breaking spaces as &nbsp;."""
    return escape(text, quote=False).replace("\xa0", "&nbsp;")


def render_attrs(attrs: dict[str, str]) -> str:
    return "".join(f' {key}="{escape(value, quote=True)}"' for key, value in attrs.items())


class _Writer:
    def __init__(self, collect_spans: bool):
        self.parts: list[str] = []
        self.length = 0
        self.collect_spans = collect_spans
        self.spans: list[SourceSpan] = []

    def write(self, text: str) -> None:
        self.parts.append(text)
        self.length += len(text)

    def node(self, node: Node, path: NodePath, raw: bool = False) -> None:
        start = self.length
        if isinstance(node, TextRun):
            char_ends: list[int] = []
            for char in node.text:
                self.write(char if raw else escape_text(char))
                if self.collect_spans:
                    char_ends.append(self.length - start)
            if self.collect_spans:
                self.spans.append(SourceSpan(path, start, self.length, start, True, char_ends))
            return
        if isinstance(node, Image):
            self.write(f"<img{render_attrs(node.attrs)}>")
            if self.collect_spans:
                self.spans.append(SourceSpan(path, start, self.length, self.length, is_image=True))
            return
        if isinstance(node, Link):
            tag, attrs, children = "a", node.attrs, node.children
        elif isinstance(node, Element):
            tag, attrs, children = node.tag, node.attrs, node.children
        else:
            raise TypeError(f"Unknown content node type: {type(node).__name__}")

        self.write(f"<{tag}{render_attrs(attrs)}>")
        inner_start = self.length
        if tag in VOID_TAGS and not children:
            if self.collect_spans:
                self.spans.append(SourceSpan(path, start, self.length, inner_start))
            return
        # Record the container before its children so spans stay in document order
        span = SourceSpan(path, start, start, inner_start)
        if self.collect_spans:
            self.spans.append(span)
        for index, child in enumerate(children):
            self.node(child, path + (index,), raw=tag in RAW_TEXT_TAGS)
        self.write(f"</{tag}>")
        span.end = self.length


def render_nodes(nodes: list[Node]) -> str:
    """Render a list of sibling nodes."""
    writer = _Writer(collect_spans=False)
    for index, node in enumerate(nodes):
        writer.node(node, (index,))
    return "".join(writer.parts)


def render_html(document: Union[Document, Node]) -> str:
    """Render a document (or a single node) to an HTML string."""
    if isinstance(document, Document):
        return render_nodes(document.children)
    return render_nodes([document])


def render_with_spans(document: Document) -> tuple[str, list[SourceSpan]]:
    """Render a document and report each node's location in the output.

    Returns:
        Tuple of (html, spans) with spans in document order
    """
    writer = _Writer(collect_spans=True)
    for index, node in enumerate(document.children):
        writer.node(node, (index,))
    return "".join(writer.parts), writer.spans


def span_at(spans: list[SourceSpan], offset: int) -> Optional[SourceSpan]:
    """Deepest span containing an output offset.

    Text runs also claim the offset just past their last character so a
    cursor at the end of a word resolves to that word, even when another
    sibling starts right there.
    """
    best: Optional[SourceSpan] = None
    for span in spans:
        inside = span.start <= offset < span.end or (span.is_text and offset == span.end)
        if not inside:
            continue
        if best is None or len(span.path) > len(best.path):
            best = span
        elif len(span.path) == len(best.path) and span.is_text:
            best = span
    return best


def position_at(spans: list[SourceSpan], offset: int) -> Position:
    """Tree position for an output offset (e.g. a cursor in the markup).

    Inside a text run this is a character offset and inside an image it is
    the image itself. Elsewhere it is the index of the child the cursor sits
    before, within the enclosing container or the document root.
    """
    span = span_at(spans, offset)
    if span is not None and span.is_text:
        return Position(path=span.path, offset=span.text_offset(offset))
    if span is not None and span.is_image:
        return Position(path=span.path, offset=0)
    if span is not None and span.inner_start == span.end:
        # Inside a void element such as <br>: the cursor sits after it
        return Position(path=span.path[:-1], offset=span.path[-1] + 1)

    parent: NodePath = span.path if span is not None else ()
    depth = len(parent) + 1
    index = sum(
        1 for child in spans
        if len(child.path) == depth and child.path[:-1] == parent and child.end <= offset
    )
    return Position(path=parent, offset=index)


def offset_of(spans: list[SourceSpan], position: Position, total: int) -> int:
    """Output offset for a tree position; the inverse of position_at.

    Args:
        spans: Spans from render_with_spans
        position: Position in the rendered document
        total: Length of the rendered output
    """
    by_path = {span.path: span for span in spans}
    span = by_path.get(position.path)
    if span is not None and span.is_text:
        return span.source_offset(position.offset)
    if span is not None and span.is_image:
        return span.start

    child = by_path.get(position.path + (position.offset,))
    if child is not None:
        return child.start
    if position.offset > 0:
        previous = by_path.get(position.path + (position.offset - 1,))
        if previous is not None:
            return previous.end
    if span is not None:
        return span.inner_start
    return total if position.path == () and position.offset > 0 else 0
