"""Annotation engine: attach and remove links around content elements.

The element the user means is resolved in a fixed order (first match wins):

1. the node at the selection start, if it is the target type
2. the parent of that node, if it is the target type
3. the nearest common ancestor of the selection, or else its parent
4. the target remembered from a direct pick (or the last annotation) in the
   same block, if it is still in the document
5. the last target-type node of the block in document order

When nothing matches the operation reports NothingSelected and changes
nothing. The default target type is Image.
"""

from enum import Enum
from typing import Optional

from adsmith.content.nodes import Document, Image, Link, Node, NodePath, common_prefix
from adsmith.content.sanitize import (
    FOCUS_ATTRIBUTE,
    SELECTED_ATTRIBUTE,
    SELECTED_CLASS,
    SELECTION_HIGHLIGHT_STYLE,
    clean_node_attrs,
)
from adsmith.models.prompt import PromptRequest, is_confirmed
from adsmith.models.selection import Selection
from adsmith.services.exceptions import NothingSelected, StateInconsistency, ValidationFailure
from adsmith.services.links import request_link
from adsmith.services.prompt_queue import PromptQueue
from adsmith.services.selection import SelectionTracker
from adsmith.services.surfaces import EditingSurface
from adsmith.utils.logging import get_logger


logger = get_logger(__name__)

LINK_TARGET = "_blank"


class AnnotationResult(str, Enum):
    """What an attach/detach call did."""

    ATTACHED = "attached"
    REPLACED = "replaced"
    DETACHED = "detached"
    ABORTED = "aborted"
    UNCHANGED = "unchanged"


def make_link(href: str, children: list[Node]) -> Link:
    """Create a link wrapper that opens in a new tab."""
    return Link(attrs={"href": href, "target": LINK_TARGET}, children=children)


def enclosing_link_path(document: Document, path: NodePath) -> Optional[NodePath]:
    """Path of the nearest Link ancestor of the node at path, if any."""
    for depth in range(len(path) - 1, 0, -1):
        if isinstance(document.node_at(path[:depth]), Link):
            return path[:depth]
    return None


class AnnotationEngine:
    """Resolves the user's target element and wraps/unwraps it in a link."""

    def __init__(
        self,
        prompts: PromptQueue,
        tracker: SelectionTracker,
        target_type: type = Image,
    ):
        """Initialize engine.

        Args:
            prompts: Prompt channel used for link input and replace confirmation
            tracker: Selection tracker shared with the editor
            target_type: Node type annotations apply to
        """
        self.prompts = prompts
        self.tracker = tracker
        self.target_type = target_type
        # (block_key, node) of the last picked or annotated target
        self._remembered: Optional[tuple[str, Node]] = None

    @property
    def remembered(self) -> Optional[tuple[str, Node]]:
        return self._remembered

    def forget(self, block_key: Optional[str] = None) -> None:
        """Drop the remembered target (only if it belongs to block_key, when given)."""
        if self._remembered is None:
            return
        if block_key is None or self._remembered[0] == block_key:
            self._remembered = None

    def rekey(self, old_key: str, new_key: str) -> None:
        """Follow a block whose identity changed after its first save."""
        if self._remembered is not None and self._remembered[0] == old_key:
            self._remembered = (new_key, self._remembered[1])

    def resolve(self, surface: EditingSurface) -> tuple[NodePath, Node]:
        """Find the element the user currently means.

        Raises:
            StateInconsistency: If the surface is no longer mounted
            NothingSelected: If no element of the target type qualifies
        """
        if not surface.is_mounted:
            raise StateInconsistency(f"Block {surface.block_key} is no longer open")

        document = surface.document
        target_type = self.target_type
        selection = surface.get_selection()

        if selection is not None:
            start = selection.start.path
            # 1. selection start itself
            if isinstance(document.node_at(start), target_type):
                return start, document.node_at(start)
            # 2. structural parent of the selection start
            if start and isinstance(document.node_at(start[:-1]), target_type):
                return start[:-1], document.node_at(start[:-1])
            # 3. nearest common ancestor, else its parent
            ancestor = common_prefix(start, selection.end.path)
            if isinstance(document.node_at(ancestor), target_type):
                return ancestor, document.node_at(ancestor)
            if ancestor and isinstance(document.node_at(ancestor[:-1]), target_type):
                return ancestor[:-1], document.node_at(ancestor[:-1])

        # 4. remembered target, same block only
        if self._remembered is not None:
            block_key, node = self._remembered
            if block_key == surface.block_key and isinstance(node, target_type):
                path = document.path_of(node)
                if path is not None:
                    return path, node

        # 5. most recently inserted target in document order
        for path, node in reversed(list(document.walk())):
            if isinstance(node, target_type):
                return path, node

        raise NothingSelected(f"No {target_type.__name__.lower()} selected")

    def pick(self, surface: EditingSurface, path: NodePath) -> Node:
        """Directly select an element (e.g. the user clicked an image).

        The element gets the transient selection highlight and is
        remembered for resolution step 4.

        Raises:
            ValidationFailure: If path does not address a target-type node
        """
        node = surface.document.node_at(path)
        if not isinstance(node, self.target_type):
            raise ValidationFailure(f"Nothing to pick at {path}")

        self._clear_marks(surface.document)
        node.attrs[SELECTED_ATTRIBUTE] = "true"
        classes = node.attrs.get("class", "").split()
        node.attrs["class"] = " ".join(classes + [SELECTED_CLASS])
        style = node.attrs.get("style", "").strip().rstrip(";")
        node.attrs["style"] = f"{style}; {SELECTION_HIGHLIGHT_STYLE}" if style else SELECTION_HIGHLIGHT_STYLE

        self._remembered = (surface.block_key, node)
        surface.select(Selection.caret(path))
        self.tracker.track(surface)
        surface.focus()
        logger.debug("target_picked", block_key=surface.block_key, path=list(path))
        surface.changed()
        return node

    async def attach_link(self, surface: EditingSurface, href: Optional[str] = None) -> AnnotationResult:
        """Wrap the resolved target in a link, asking for the URL if not given.

        When the target already has a link the user must confirm the
        replacement. The selection is captured before every prompt and
        restored (with focus) before the content is touched.

        Args:
            surface: Surface of the block being edited
            href: Link URL; when None the user is asked via the prompt queue

        Returns:
            ATTACHED, REPLACED, or ABORTED

        Raises:
            NothingSelected: If there is no target
            StateInconsistency: If the target vanished while a prompt was open
            ValidationFailure: If the typed link input is malformed
        """
        self.tracker.capture()
        if href is None:
            try:
                href = await request_link(self.prompts)
            finally:
                self.tracker.restore_and_focus(surface)
            if href is None:
                return AnnotationResult.ABORTED
        else:
            self.tracker.restore_and_focus(surface)

        path, target = self.resolve(surface)
        link_path = enclosing_link_path(surface.document, path)

        if link_path is None:
            surface.document.replace_at(path, [make_link(href, [target])])
            result = AnnotationResult.ATTACHED
        else:
            old_link = surface.document.node_at(link_path)
            self.tracker.capture()
            outcome = await self.prompts.ask(PromptRequest.confirm(
                "Replace Link",
                f"This {self.target_type.__name__.lower()} already links to {old_link.href}. Replace it?",
            ))
            self.tracker.restore_and_focus(surface)
            if not is_confirmed(outcome):
                logger.info("link_replace_declined", block_key=surface.block_key)
                return AnnotationResult.ABORTED

            # The prompt was open long enough for the content to change
            link_path = surface.document.path_of(old_link) if surface.is_mounted else None
            if link_path is None or surface.document.path_of(target) is None:
                raise StateInconsistency("The selected element changed while the prompt was open")
            surface.document.replace_at(link_path, [make_link(href, old_link.children)])
            result = AnnotationResult.REPLACED

        self._mark_focused(surface, target)
        logger.info("link_attached", block_key=surface.block_key, href=href, replaced=result == AnnotationResult.REPLACED)
        surface.changed()
        return result

    def detach_link(self, surface: EditingSurface) -> AnnotationResult:
        """Unwrap the resolved target from its link, leaving it in place.

        Returns:
            DETACHED, or UNCHANGED if the target has no link

        Raises:
            NothingSelected: If there is no target
        """
        self.tracker.restore_and_focus(surface)
        path, target = self.resolve(surface)
        link_path = enclosing_link_path(surface.document, path)
        if link_path is None:
            logger.debug("link_detach_skipped", block_key=surface.block_key, reason="not linked")
            return AnnotationResult.UNCHANGED

        link = surface.document.node_at(link_path)
        surface.document.replace_at(link_path, list(link.children))
        self._mark_focused(surface, target)
        logger.info("link_detached", block_key=surface.block_key, href=link.href)
        surface.changed()
        return AnnotationResult.DETACHED

    def _mark_focused(self, surface: EditingSurface, target: Node) -> None:
        self._clear_marks(surface.document)
        target.attrs[FOCUS_ATTRIBUTE] = "true"
        self._remembered = (surface.block_key, target)

    @staticmethod
    def _clear_marks(document: Document) -> None:
        for _, node in document.walk():
            clean_node_attrs(node)
