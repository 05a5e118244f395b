"""Strip transient editing artifacts from block content before saving.

The editing surface and the annotation engine mark nodes while the user
works (focus marker, selection highlight). Those marks are presentation
only and must never reach the API. Links and structural content are kept
exactly as they are.
"""

from adsmith.content.nodes import Document, Node, node_attrs
from adsmith.content.parser import parse_html
from adsmith.content.renderer import render_html


FOCUS_ATTRIBUTE = "data-adsmith-focus"
SELECTED_ATTRIBUTE = "data-adsmith-selected"
FOCUS_CLASS = "adsmith-focus"
SELECTED_CLASS = "adsmith-selected"

MARKER_ATTRIBUTES = frozenset({FOCUS_ATTRIBUTE, SELECTED_ATTRIBUTE})
TRANSIENT_CLASSES = frozenset({FOCUS_CLASS, SELECTED_CLASS})
# Removed only from marked nodes; authors may use them too
MARKED_ONLY_ATTRIBUTES = frozenset({"contenteditable"})
TRANSIENT_STYLE_PROPERTIES = frozenset({"outline", "outline-offset"})

# Inline style the editor applies to a picked element
SELECTION_HIGHLIGHT_STYLE = "outline: 2px solid #3b82f6; outline-offset: 2px"


def strip_style_properties(style: str, properties: frozenset[str]) -> str:
    """Remove CSS declarations by property name from an inline style.

    The style string is returned unchanged when nothing is removed.

    Example:
        >>> strip_style_properties("width:200px; outline: 2px solid red", TRANSIENT_STYLE_PROPERTIES)
        "width:200px"
    """
    declarations = [part for part in style.split(";") if part.strip()]
    kept = [
        part for part in declarations
        if part.split(":", 1)[0].strip().lower() not in properties
    ]
    if len(kept) == len(declarations):
        return style
    return "; ".join(part.strip() for part in kept)


def is_marked(attrs: dict[str, str]) -> bool:
    """True if the editor marked this node as focused or selected."""
    if any(name.lower() in MARKER_ATTRIBUTES for name in attrs):
        return True
    return any(name in TRANSIENT_CLASSES for name in attrs.get("class", "").split())


def clean_node_attrs(node: Node) -> bool:
    """Remove transient attributes, classes and styles from one node.

    The highlight style properties and ``contenteditable`` are removed only
    from nodes the editor marked (marker attribute or transient class).

    Returns:
        True if anything was removed
    """
    attrs = node_attrs(node)
    if attrs is None:
        return False
    if not is_marked(attrs):
        return False

    changed = False
    for name in list(attrs):
        if name.lower() in MARKER_ATTRIBUTES or name.lower() in MARKED_ONLY_ATTRIBUTES:
            del attrs[name]
            changed = True

    if "class" in attrs:
        classes = attrs["class"].split()
        kept = [name for name in classes if name not in TRANSIENT_CLASSES]
        if len(kept) != len(classes) or not kept:
            changed = True
            if kept:
                attrs["class"] = " ".join(kept)
            else:
                del attrs["class"]

    if "style" in attrs:
        style = strip_style_properties(attrs["style"], TRANSIENT_STYLE_PROPERTIES)
        if style != attrs["style"]:
            changed = True
            if style.strip():
                attrs["style"] = style
            else:
                del attrs["style"]

    return changed


def sanitize_document(document: Document) -> Document:
    """Strip transient editing artifacts from a document in place.

    Returns:
        The same document, for chaining
    """
    changed = False
    for _, node in document.walk():
        changed = clean_node_attrs(node) or changed
    if changed:
        document.touch()
    return document


def sanitize_html(html: str) -> str:
    """Sanitize serialized block content.

    Idempotent: sanitizing already-sanitized content returns it unchanged.

    Example:
        >>> sanitize_html('<img src="a.png" data-adsmith-focus="true">')
        '<img src="a.png">'
    """
    return render_html(sanitize_document(parse_html(html)))
