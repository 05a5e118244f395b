"""Editing surfaces: the mounted, editable state of each block.

A surface holds the parsed content tree of one block together with its
current selection and focus. The persistence layer reads live content from
mounted surfaces and falls back to the stored block content otherwise.
"""

from typing import Callable, Iterable, Optional

from adsmith.content.nodes import Document, Element, TextRun
from adsmith.content.parser import parse_html
from adsmith.content.renderer import render_html
from adsmith.models.selection import Position, Selection
from adsmith.services.selection import SelectionHandle
from adsmith.utils.logging import get_logger


logger = get_logger(__name__)

# Containers that hold a line of content
BLOCK_TAGS = frozenset({"p", "div"})


class EditingSurface(SelectionHandle):
    """In-memory editing surface for one block."""

    def __init__(self, block_key: str, html: str = ""):
        """Initialize surface from serialized content.

        Args:
            block_key: Identity key of the edited block
            html: Initial block content
        """
        self._block_key = block_key
        self.document: Document = parse_html(html)
        self._selection: Optional[Selection] = None
        self._mounted = True
        self.has_focus = False
        self._listeners: list[Callable[["EditingSurface"], None]] = []

    @property
    def block_key(self) -> str:
        return self._block_key

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    @property
    def revision(self) -> int:
        return self.document.revision

    @property
    def html(self) -> str:
        """Current content serialized to HTML (transient marks included)."""
        return render_html(self.document)

    def get_selection(self) -> Optional[Selection]:
        return self._selection

    def apply_selection(self, selection: Selection) -> None:
        self._selection = selection

    def clear_selection(self) -> None:
        self._selection = None

    def focus(self) -> None:
        self.has_focus = True

    def blur(self) -> None:
        self.has_focus = False

    def select(self, selection: Optional[Selection]) -> None:
        """Set the selection from a user interaction (None clears it)."""
        self._selection = selection

    def load_html(self, html: str) -> None:
        """Replace the content wholesale.

        Any selection captured before this call becomes stale, because the
        revision moves forward even though the tree is new.
        """
        revision = self.document.revision
        self.document = parse_html(html)
        self.document.revision = revision + 1
        self._selection = None
        self.changed()

    def rekey(self, block_key: str) -> None:
        """Attach the surface to a new block identity (after first save)."""
        self._block_key = block_key

    def unmount(self) -> None:
        self._mounted = False
        self.has_focus = False
        self._selection = None

    def subscribe(self, callback: Callable[["EditingSurface"], None]) -> None:
        """Register a callback invoked after each content mutation."""
        self._listeners.append(callback)

    def unsubscribe(self, callback: Callable[["EditingSurface"], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def changed(self) -> None:
        """Notify listeners that the content tree was mutated."""
        for callback in list(self._listeners):
            callback(self)

    def end_position(self) -> Position:
        """Caret position at the end of the content.

        Lands inside a trailing text run or paragraph when there is one, so
        appended content joins the last line instead of starting a new one.
        """
        children = self.document.children
        if children:
            last = children[-1]
            if isinstance(last, TextRun):
                return Position(path=(len(children) - 1,), offset=len(last.text))
            if isinstance(last, Element) and last.tag in BLOCK_TAGS:
                return Position(path=(len(children) - 1,), offset=len(last.children))
        return Position(path=(), offset=len(children))


class SurfaceRegistry:
    """Mounted editing surfaces keyed by block identity key."""

    def __init__(self):
        self._surfaces: dict[str, EditingSurface] = {}

    def __contains__(self, block_key: str) -> bool:
        return block_key in self._surfaces

    def __len__(self) -> int:
        return len(self._surfaces)

    def get(self, block_key: str) -> Optional[EditingSurface]:
        return self._surfaces.get(block_key)

    def mount(self, block_key: str, html: str = "") -> EditingSurface:
        """Return the surface for block_key, creating it from html if needed."""
        surface = self._surfaces.get(block_key)
        if surface is None:
            surface = EditingSurface(block_key, html)
            self._surfaces[block_key] = surface
            logger.debug("surface_mounted", block_key=block_key)
        return surface

    def unmount(self, block_key: str) -> Optional[EditingSurface]:
        surface = self._surfaces.pop(block_key, None)
        if surface is not None:
            surface.unmount()
            logger.debug("surface_unmounted", block_key=block_key)
        return surface

    def rekey(self, old_key: str, new_key: str) -> None:
        """Move a surface to a new identity key, keeping its content and selection."""
        surface = self._surfaces.pop(old_key, None)
        if surface is None:
            return
        stale = self._surfaces.pop(new_key, None)
        if stale is not None:
            stale.unmount()
        surface.rekey(new_key)
        self._surfaces[new_key] = surface
        logger.debug("surface_rekeyed", old_key=old_key, new_key=new_key)

    def prune(self, live_keys: Iterable[str]) -> list[EditingSurface]:
        """Unmount every surface whose block no longer exists.

        Returns:
            The unmounted surfaces
        """
        keep = set(live_keys)
        removed = []
        for key in [key for key in self._surfaces if key not in keep]:
            surface = self.unmount(key)
            if surface is not None:
                removed.append(surface)
        return removed

    def clear(self) -> list[EditingSurface]:
        return self.prune(())

    def live_html(self, block_key: str) -> Optional[str]:
        """Serialized content of the mounted surface, or None if not mounted."""
        surface = self._surfaces.get(block_key)
        if surface is None or not surface.is_mounted:
            return None
        return surface.html
