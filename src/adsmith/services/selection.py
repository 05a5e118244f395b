"""Selection tracking across interrupting prompts.

Opening a prompt dialog takes input focus away from the block being edited,
which loses the user's editing point. The tracker snapshots the selection of
the surface that last had focus and puts it back once the dialog resolves.

The tracker only talks to the SelectionHandle interface, so it works with
any editing surface (the in-memory EditingSurface, or a terminal widget).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from adsmith.models.selection import Selection
from adsmith.utils.logging import get_logger


logger = get_logger(__name__)


class SelectionHandle(ABC):
    """Opaque access to the selection of one content editing surface."""

    @property
    @abstractmethod
    def block_key(self) -> str:
        """Identity key of the block this surface edits."""

    @property
    @abstractmethod
    def is_mounted(self) -> bool:
        """False once the surface has been removed."""

    @property
    @abstractmethod
    def revision(self) -> int:
        """Content revision; changes whenever the content is mutated."""

    @abstractmethod
    def get_selection(self) -> Optional[Selection]:
        """Current selection, or None if nothing is selected."""

    @abstractmethod
    def apply_selection(self, selection: Selection) -> None:
        """Make selection the active selection."""

    @abstractmethod
    def focus(self) -> None:
        """Give input focus to the surface."""


@dataclass(frozen=True)
class SelectionSnapshot:
    """A captured selection and the content revision it was taken at."""

    handle: SelectionHandle
    selection: Selection
    revision: int

    @property
    def block_key(self) -> str:
        return self.handle.block_key

    def is_stale(self) -> bool:
        return not self.handle.is_mounted or self.handle.revision != self.revision


class SelectionTracker:
    """Owns the last selection snapshot for one editor.

    Example:
        >>> tracker.track(surface)          # surface gained focus
        >>> tracker.capture()               # before a prompt opens
        >>> ...                             # await the prompt
        >>> tracker.restore_and_focus(surface)  # before mutating the surface
    """

    def __init__(self):
        self._active: Optional[SelectionHandle] = None
        self._snapshot: Optional[SelectionSnapshot] = None

    @property
    def active(self) -> Optional[SelectionHandle]:
        """Surface that most recently had focus."""
        return self._active

    @property
    def snapshot(self) -> Optional[SelectionSnapshot]:
        return self._snapshot

    def track(self, handle: SelectionHandle) -> None:
        """Record that handle gained focus."""
        self._active = handle

    def forget(self, handle: SelectionHandle) -> None:
        """Drop references to a surface that is going away."""
        if self._active is handle:
            self._active = None
        if self._snapshot is not None and self._snapshot.handle is handle:
            self._snapshot = None

    def capture(self) -> bool:
        """Snapshot the active surface's selection.

        Returns:
            True if a snapshot was taken
        """
        handle = self._active
        if handle is None or not handle.is_mounted:
            return False
        selection = handle.get_selection()
        if selection is None:
            return False
        self._snapshot = SelectionSnapshot(handle, selection, handle.revision)
        logger.debug("selection_captured", block_key=handle.block_key, revision=handle.revision)
        return True

    def restore(self) -> bool:
        """Reapply and consume the last snapshot.

        Stale snapshots (surface removed, or content changed since capture)
        are discarded without touching any surface.

        Returns:
            True if the snapshot was applied
        """
        snapshot = self._snapshot
        self._snapshot = None
        if snapshot is None:
            return False
        if snapshot.is_stale():
            logger.warning(
                "selection_restore_stale",
                block_key=snapshot.block_key,
                mounted=snapshot.handle.is_mounted,
                captured_revision=snapshot.revision,
                current_revision=snapshot.handle.revision,
            )
            return False
        snapshot.handle.apply_selection(snapshot.selection)
        self._active = snapshot.handle
        logger.debug("selection_restored", block_key=snapshot.block_key)
        return True

    def restore_and_focus(self, handle: SelectionHandle) -> bool:
        """Restore the snapshot into handle and focus it.

        A snapshot taken on a different surface is discarded rather than
        applied, so an operation can never act on another block's selection.

        Args:
            handle: Surface the caller is about to mutate

        Returns:
            True if the captured selection was restored
        """
        snapshot = self._snapshot
        if snapshot is not None and snapshot.handle is not handle:
            logger.warning(
                "selection_restore_wrong_surface",
                captured_block=snapshot.block_key,
                target_block=handle.block_key,
            )
            self._snapshot = None
            snapshot = None

        restored = self.restore() if snapshot is not None else False
        if handle.is_mounted:
            handle.focus()
            self._active = handle
        return restored
