"""Ads editor screen.

Shows the ads of one zone of the active site. The list on the left holds
the zone's blocks in order; the editor on the right shows the markup of
the highlighted block. Editing commands act at the editor's selection.
"""

from typing import Optional

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import Screen
from textual.widgets import Footer, Label, ListView, Tab, Tabs, TextArea

from adsmith.models.block import ContentBlock, Zone
from adsmith.models.notice import Notice
from adsmith.models.prompt import PromptRequest, Submitted
from adsmith.services.editor import AdsEditor
from adsmith.services.formatting import InlineStyle
from adsmith.services.surfaces import EditingSurface
from adsmith.tui.screens.prompt_dialog import PromptDialog
from adsmith.tui.widgets.block_list import BlockList
from adsmith.tui.widgets.content_editor import ContentEditor
from adsmith.tui.widgets.status_panel import StatusPanel
from adsmith.utils.logging import get_logger

logger = get_logger(__name__)


class AdsEditorScreen(Screen):
    """Zone tabs, block list, markup editor, and status bar."""

    DEFAULT_CSS = """
    AdsEditorScreen {
        layout: vertical;
    }

    #site-label {
        height: auto;
        padding: 0 1;
        text-style: bold;
    }

    #editor-body {
        height: 1fr;
    }

    #block-list {
        width: 40%;
        border: solid $accent;
    }

    #editor-panel {
        width: 1fr;
        border: solid $accent;
        border-title-align: center;
    }

    ContentEditor {
        height: 1fr;
    }

    #status-panel {
        height: 1;
        padding: 0 1;
    }
    """

    BINDINGS = [
        ("tab", "toggle_focus", "Focus editor"),
        ("a", "add_block", "Add"),
        ("x", "remove_block", "Remove"),
        ("D", "delete_block", "Delete"),
        ("K", "move_up", "Move up"),
        ("J", "move_down", "Move down"),
        ("s", "save_zone", "Save"),
        ("S", "save_all", "Save all"),
        ("l", "attach_link", "Link"),
        ("L", "detach_link", "Unlink"),
        ("b", "style('bold')", "Bold"),
        ("i", "style('italic')", "Italic"),
        ("u", "style('underline')", "Underline"),
        ("t", "style('strike')", "Strike"),
        ("c", "style('color')", "Color"),
        ("e", "insert_emoji", "Emoji"),
        ("p", "insert_image", "Image"),
        ("r", "resize_image", "Resize"),
        ("q", "quick_add", "Quick add"),
        ("n", "next_site", "Next site"),
    ]

    def __init__(self, editor: AdsEditor, **kwargs):
        """Initialize screen.

        Args:
            editor: Editing session the screen presents
        """
        super().__init__(**kwargs)
        self.editor = editor
        self.zone = Zone.TOP
        self._dialog: Optional[PromptDialog] = None
        self._bound_surface: Optional[EditingSurface] = None
        # Set while a typed edit is pushed into the surface
        self._applying_edit = False

    def compose(self) -> ComposeResult:
        yield Label("", id="site-label")
        yield Tabs(*[Tab(zone.label, id=zone.value) for zone in Zone], id="zone-tabs")
        with Horizontal(id="editor-body"):
            yield BlockList()
            with Container(id="editor-panel"):
                yield ContentEditor()
        yield StatusPanel()
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#editor-panel").border_title = "Content"
        self.editor.store.subscribe(self._on_store_changed)
        self.editor.prompts.subscribe(self._on_prompt_changed)
        self.editor.sync.subscribe_saving(self._on_saving_changed)
        self.editor.subscribe_notices(self._on_notice)
        self._update_site_label()
        self._refresh_blocks()

    def _on_store_changed(self, zone: Optional[Zone]) -> None:
        if zone is None or zone == self.zone:
            self._update_site_label()
            self._refresh_blocks()

    def _on_prompt_changed(self, request: Optional[PromptRequest]) -> None:
        if self._dialog is not None and self._dialog.request is not request:
            if self.app.screen is self._dialog:
                self.app.pop_screen()
            self._dialog = None
        if request is not None and self._dialog is None:
            self._dialog = PromptDialog(self.editor.prompts, request)
            self.app.push_screen(self._dialog)

    def _on_saving_changed(self, saving: bool) -> None:
        self.query_one(StatusPanel).update_status(saving=saving)

    def _on_notice(self, notice: Notice) -> None:
        self.query_one(StatusPanel).show_notice(notice)
        if notice.level == "error":
            self.app.notify(notice.message, title=notice.title, severity="error")

    def _on_surface_changed(self, surface: EditingSurface) -> None:
        if self._applying_edit or surface is not self._bound_surface:
            return
        self.query_one(ContentEditor).refresh_from_surface()

    def _update_site_label(self) -> None:
        self.query_one("#site-label", Label).update(f"Site: {self.editor.site}")
        self.query_one(StatusPanel).update_status(site=self.editor.site, zone=self.zone)

    def _refresh_blocks(self) -> None:
        block_list = self.query_one(BlockList)
        block_list.show_blocks(self.editor.store.zone_blocks(self.zone))
        self._bind_current()

    def _bind_current(self) -> None:
        block = self._current_block()
        surface = self.editor.surface(block) if block is not None else None
        if surface is self._bound_surface:
            return
        if self._bound_surface is not None:
            self._bound_surface.unsubscribe(self._on_surface_changed)
        if surface is not None:
            surface.subscribe(self._on_surface_changed)
        self._bound_surface = surface
        self.query_one(ContentEditor).bind_surface(surface)

    def _current_block(self) -> Optional[ContentBlock]:
        return self.query_one(BlockList).get_current_block()

    def _prepare(self) -> Optional[ContentBlock]:
        """Current block, with the editor selection pushed into its surface."""
        block = self._current_block()
        if block is None:
            self.editor.post_notice(Notice(level="info", title="Nothing selected", message="Add or pick an ad first"))
            return None
        self.editor.select(block, self.query_one(ContentEditor).current_selection())
        return block

    def on_tabs_tab_activated(self, event: Tabs.TabActivated) -> None:
        if event.tab is None or event.tab.id is None:
            return
        self.zone = Zone(event.tab.id)
        logger.info("user_action_zone_selected", zone=self.zone.value)
        self._update_site_label()
        self._refresh_blocks()

    def on_list_view_highlighted(self, event: ListView.Highlighted) -> None:
        self._bind_current()

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        block = self._current_block()
        content_editor = self.query_one(ContentEditor)
        if block is None or event.text_area is not content_editor or content_editor.surface is None:
            return
        self._applying_edit = True
        try:
            self.editor.set_content(block.zone, block.identity, content_editor.text)
        finally:
            self._applying_edit = False

    def action_toggle_focus(self) -> None:
        content_editor = self.query_one(ContentEditor)
        if content_editor.has_focus:
            self.set_focus(None)
        else:
            content_editor.focus()
        logger.info("user_action_toggle_focus", focused=not content_editor.has_focus)

    def action_add_block(self) -> None:
        self.editor.add(self.zone)
        block_list = self.query_one(BlockList)
        block_list.index = len(block_list.blocks) - 1

    def action_remove_block(self) -> None:
        block = self._current_block()
        if block is not None:
            self.editor.remove(block.zone, block.identity)

    def action_delete_block(self) -> None:
        block = self._current_block()
        if block is not None:
            self.run_worker(self.editor.delete(block.zone, block.identity), name="delete")

    def _move(self, step: int) -> None:
        block_list = self.query_one(BlockList)
        index = block_list.index
        if index is None:
            return
        if self.editor.reorder(self.zone, index, index + step):
            block_list.index = index + step

    def action_move_up(self) -> None:
        self._move(-1)

    def action_move_down(self) -> None:
        self._move(1)

    def action_save_zone(self) -> None:
        self.run_worker(self.editor.save(self.zone), name="save")

    def action_save_all(self) -> None:
        self.run_worker(self.editor.save_all(), name="save_all")

    def action_attach_link(self) -> None:
        block = self._prepare()
        if block is not None:
            self.run_worker(self.editor.attach_link(block), name="attach_link")

    def action_detach_link(self) -> None:
        block = self._prepare()
        if block is not None:
            self.editor.detach_link(block)

    def action_style(self, style: str) -> None:
        block = self._prepare()
        if block is not None:
            inline_style = InlineStyle[style.upper()]
            self.run_worker(self.editor.apply_inline_style(block, inline_style), name="style")

    def action_insert_emoji(self) -> None:
        block = self._prepare()
        if block is not None:
            self.run_worker(self.editor.insert_text(block), name="insert_text")

    def action_insert_image(self) -> None:
        block = self._prepare()
        if block is not None:
            self.run_worker(self._insert_image(block), name="insert_image")

    async def _insert_image(self, block: ContentBlock) -> None:
        outcome = await self.editor.prompts.ask(PromptRequest.text("Insert Image", "Enter image URL:"))
        if isinstance(outcome, Submitted) and outcome.value.strip():
            await self.editor.insert_image(block, outcome.value, ask_link=True)

    def action_resize_image(self) -> None:
        block = self._prepare()
        if block is not None:
            self.run_worker(self.editor.resize_last_image(block), name="resize_image")

    def action_quick_add(self) -> None:
        self.run_worker(self.editor.quick_add(), name="quick_add")

    def action_next_site(self) -> None:
        sites = self.editor.config.site_values()
        next_site = sites[(sites.index(self.editor.site) + 1) % len(sites)]
        logger.info("user_action_next_site", site=next_site)
        self.run_worker(self.editor.switch_site(next_site), name="switch_site", exclusive=True)
