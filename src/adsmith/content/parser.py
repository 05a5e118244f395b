"""Parse block HTML into the typed content tree.

Parsing uses BeautifulSoup with the stdlib ``html.parser`` backend, so
malformed markup from older editors is normalized instead of rejected.
"""

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

from adsmith.content.nodes import Document, Element, Image, Link, Node, TextRun


def parse_html(html: str) -> Document:
    """Parse an HTML fragment into a Document.

    Comments, doctypes and other declarations are dropped. Adjacent text is merged
    into a single TextRun. Multi-valued attributes such as ``class`` are kept
    as the raw attribute string.

    Args:
        html: Serialized block content (may be empty)

    Returns:
        Document with revision 0
    """
    if not html:
        return Document()
    soup = BeautifulSoup(html, "html.parser", multi_valued_attributes=None)
    return Document(children=_convert_children(soup))


def _convert_children(parent: Tag) -> list[Node]:
    nodes: list[Node] = []
    for child in parent.children:
        node = _convert(child)
        if node is None:
            continue
        if isinstance(node, TextRun) and nodes and isinstance(nodes[-1], TextRun):
            nodes[-1].text += node.text
            continue
        nodes.append(node)
    return nodes


def _convert(item) -> Node | None:
    if isinstance(item, PreformattedString):
        return None
    if isinstance(item, NavigableString):
        text = str(item)
        return TextRun(text) if text else None
    if isinstance(item, Tag):
        attrs = {key: ("" if value is None else str(value)) for key, value in item.attrs.items()}
        name = item.name.lower()
        if name == "img":
            return Image(attrs=attrs)
        if name == "a":
            return Link(attrs=attrs, children=_convert_children(item))
        return Element(tag=name, attrs=attrs, children=_convert_children(item))
    return None
