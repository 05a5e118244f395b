"""Editing commands that act at a surface's editing point.

Each command works at the surface's current selection, or at the end of
the content when nothing is selected. Callers restore the selection and
focus the surface before invoking a command.
"""

import re
from enum import Enum
from typing import Optional

from adsmith.content.nodes import Element, Image, Link, Node, NodePath, TextRun
from adsmith.models.selection import Position, Selection
from adsmith.services.exceptions import ValidationFailure
from adsmith.services.surfaces import EditingSurface
from adsmith.utils.logging import get_logger


logger = get_logger(__name__)

_COLOR_RE = re.compile(r"^(#[0-9a-fA-F]{3,8}|[a-zA-Z]+|rgba?\([\d\s.,%]+\))$")


class InlineStyle(str, Enum):
    """Inline styles the editor can apply to selected text."""

    BOLD = "b"
    ITALIC = "i"
    UNDERLINE = "u"
    STRIKE = "strike"
    COLOR = "color"


def image_node(src: str, width: int = 200) -> Image:
    """Create an inline image with the editor's default presentation."""
    return Image(attrs={
        "src": src,
        "style": f"width:{width}px;height:auto;max-width:none;border-radius:4px;",
        "draggable": "false",
    })


def _split_text(run: TextRun, *offsets: int) -> list[str]:
    pieces = []
    previous = 0
    for offset in offsets:
        pieces.append(run.text[previous:offset])
        previous = offset
    pieces.append(run.text[previous:])
    return pieces


def _editing_point(surface: EditingSurface) -> Position:
    selection = surface.get_selection()
    if selection is None:
        return surface.end_position()
    return selection.start


def insert_node(surface: EditingSurface, node: Node) -> NodePath:
    """Insert a node at the editing point and put the caret after it.

    Inside a text run the run is split around the new node; on an image the
    node goes right after the image.

    Returns:
        Path of the inserted node
    """
    document = surface.document
    position = _editing_point(surface)
    target = document.node_at(position.path)

    if isinstance(target, TextRun):
        offset = min(position.offset, len(target.text))
        before, after = _split_text(target, offset)
        pieces: list[Node] = []
        if before:
            pieces.append(TextRun(before))
        pieces.append(node)
        if after:
            pieces.append(TextRun(after))
        document.replace_at(position.path, pieces)
        path = position.path[:-1] + (position.path[-1] + (1 if before else 0),)
    elif isinstance(target, Image):
        path = document.insert_at(position.path[:-1], position.path[-1] + 1, node)
    elif isinstance(target, (Element, Link)) or not position.path:
        path = document.insert_at(position.path, position.offset, node)
    else:
        # Path no longer exists: fall back to the end of the content
        end = surface.end_position()
        path = document.insert_at(end.path, end.offset, node) if not isinstance(
            document.node_at(end.path), TextRun
        ) else document.insert_at(end.path[:-1], end.path[-1] + 1, node)

    surface.select(Selection.caret(path[:-1], path[-1] + 1))
    surface.changed()
    return path


def insert_text(surface: EditingSurface, text: str) -> None:
    """Insert text (e.g. an emoji) at the editing point.

    Raises:
        ValidationFailure: If text is empty
    """
    if not text:
        raise ValidationFailure("Nothing to insert")
    document = surface.document
    position = _editing_point(surface)
    target = document.node_at(position.path)

    if isinstance(target, TextRun):
        offset = min(position.offset, len(target.text))
        before, after = _split_text(target, offset)
        target.text = before + text + after
        document.touch()
        surface.select(Selection.caret(position.path, offset + len(text)))
        surface.changed()
    else:
        insert_node(surface, TextRun(text))
    logger.debug("text_inserted", block_key=surface.block_key, length=len(text))


def apply_inline_style(surface: EditingSurface, style: InlineStyle, color: Optional[str] = None) -> NodePath:
    """Wrap the selected text in an inline style element.

    The selection must cover text inside a single text run.

    Returns:
        Path of the new style element

    Raises:
        ValidationFailure: If the selection is not a non-empty range in one
                           text run, or the color is invalid
    """
    style = InlineStyle(style)
    selection = surface.get_selection()
    if selection is None or selection.start.path != selection.end.path:
        raise ValidationFailure("Select some text within one line to style it")
    run = surface.document.node_at(selection.start.path)
    if not isinstance(run, TextRun):
        raise ValidationFailure("Select some text to style it")

    low, high = sorted((selection.start.offset, selection.end.offset))
    high = min(high, len(run.text))
    if low >= high:
        raise ValidationFailure("Select some text to style it")

    if style == InlineStyle.COLOR:
        color = (color or "").strip()
        if not _COLOR_RE.match(color):
            raise ValidationFailure(f"Invalid color: {color!r}")
        attrs = {"style": f"color: {color}"}
        tag = "span"
    else:
        attrs = {}
        tag = style.value

    before, middle, after = _split_text(run, low, high)
    styled = Element(tag=tag, attrs=attrs, children=[TextRun(middle)])
    pieces: list[Node] = [node for node in (TextRun(before) if before else None, styled,
                                            TextRun(after) if after else None) if node is not None]
    surface.document.replace_at(selection.start.path, pieces)

    path = selection.start.path[:-1] + (selection.start.path[-1] + (1 if before else 0),)
    surface.select(Selection.span(path + (0,), 0, path + (0,), len(middle)))
    logger.debug("inline_style_applied", block_key=surface.block_key, style=style.value)
    surface.changed()
    return path


def _style_declarations(style: str) -> dict[str, str]:
    declarations: dict[str, str] = {}
    for part in style.split(";"):
        if ":" not in part:
            continue
        name, value = part.split(":", 1)
        declarations[name.strip().lower()] = value.strip()
    return declarations


def resize_last_image(surface: EditingSurface, width: int) -> Image:
    """Set the width of the last image in the block (height follows).

    Raises:
        ValidationFailure: If width is not positive or there is no image
    """
    if width <= 0:
        raise ValidationFailure(f"Invalid image width: {width}")
    images = surface.document.find_all(Image)
    if not images:
        raise ValidationFailure("No image to resize")

    image = images[-1]
    declarations = _style_declarations(image.attrs.get("style", ""))
    declarations.update({"width": f"{width}px", "height": "auto", "max-width": "none"})
    image.attrs["style"] = "".join(f"{name}:{value};" for name, value in declarations.items())
    surface.document.touch()
    logger.info("image_resized", block_key=surface.block_key, width=width)
    surface.changed()
    return image
