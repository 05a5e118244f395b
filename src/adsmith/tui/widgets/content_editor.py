"""ContentEditor widget for editing a block's HTML.

The editor shows the markup of one block's editing surface. Cursor and
selection locations in the markup are translated to positions in the
surface's content tree, so editing commands act where the user points.
"""

from typing import Optional

from textual.reactive import reactive
from textual.widgets import TextArea
from textual.widgets.text_area import Selection as TextSelection

from adsmith.content.renderer import offset_of, position_at, render_with_spans
from adsmith.models.selection import Selection
from adsmith.services.surfaces import EditingSurface


class ContentEditor(TextArea):
    """Multi-line markup editor bound to an EditingSurface."""

    # Reactive attribute to track if editor has focus
    editor_has_focus = reactive(False)

    def __init__(self, *args, **kwargs):
        """Initialize ContentEditor."""
        super().__init__("", *args, id="content-editor", **kwargs)
        self.can_focus = True
        self.show_line_numbers = False
        self.soft_wrap = True
        self.surface: Optional[EditingSurface] = None

    def on_focus(self) -> None:
        self.editor_has_focus = True
        self.styles.border = ("heavy", "blue")

    def on_blur(self) -> None:
        self.editor_has_focus = False
        self.styles.border = ("solid", "white")

    def bind_surface(self, surface: Optional[EditingSurface]) -> None:
        """Show a surface's content (None clears the editor)."""
        self.surface = surface
        self.refresh_from_surface()

    def refresh_from_surface(self) -> None:
        """Reload the markup from the bound surface and mirror its selection."""
        if self.surface is None:
            self.load_text("")
            return
        html, spans = render_with_spans(self.surface.document)
        self.load_text(html)
        selection = self.surface.get_selection()
        if selection is not None:
            start = offset_of(spans, selection.start, len(html))
            end = offset_of(spans, selection.end, len(html))
            self.selection = self._text_selection(start, end)

    def _text_selection(self, start: int, end: int) -> TextSelection:
        return TextSelection(
            self.document.get_location_from_index(start),
            self.document.get_location_from_index(end),
        )

    def current_selection(self) -> Optional[Selection]:
        """The editor selection as a content-tree selection.

        Returns None while the markup has unsaved edits that the surface
        does not reflect yet (offsets would not line up).
        """
        if self.surface is None:
            return None
        html, spans = render_with_spans(self.surface.document)
        if html != self.text:
            return None
        start = self.document.get_index_from_location(self.selection.start)
        end = self.document.get_index_from_location(self.selection.end)
        start, end = sorted((start, end))
        return Selection(start=position_at(spans, start), end=position_at(spans, end))

    def get_content(self) -> str:
        return self.text
