"""Textual screens."""

from adsmith.tui.screens.ads_editor import AdsEditorScreen
from adsmith.tui.screens.prompt_dialog import PromptDialog

__all__ = [
    "AdsEditorScreen",
    "PromptDialog",
]
