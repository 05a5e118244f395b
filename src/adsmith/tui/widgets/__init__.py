"""Textual widget components."""

from adsmith.tui.widgets.block_list import BlockList
from adsmith.tui.widgets.content_editor import ContentEditor
from adsmith.tui.widgets.status_panel import StatusPanel

__all__ = [
    "BlockList",
    "ContentEditor",
    "StatusPanel",
]
