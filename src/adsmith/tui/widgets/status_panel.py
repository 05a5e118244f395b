"""StatusPanel widget showing the active site, zone, save state and last notice."""

from typing import Optional

from rich.text import Text
from textual.widgets import Static

from adsmith.models.block import Zone
from adsmith.models.notice import Notice

NOTICE_STYLES = {
    "info": "cyan",
    "success": "green",
    "error": "bold red",
}


class StatusPanel(Static):
    """One-line status bar for the ads editor."""

    def __init__(self, *args, **kwargs):
        super().__init__("", *args, id="status-panel", **kwargs)
        self.site = ""
        self.zone = Zone.TOP
        self.saving = False
        self.notice: Optional[Notice] = None

    def on_mount(self) -> None:
        self.update_status()

    def update_status(
        self,
        site: Optional[str] = None,
        zone: Optional[Zone] = None,
        saving: Optional[bool] = None,
    ) -> None:
        """Update any of the displayed fields and redraw."""
        if site is not None:
            self.site = site
        if zone is not None:
            self.zone = zone
        if saving is not None:
            self.saving = saving

        text = Text()
        text.append(self.site, style="bold")
        text.append(f" | {self.zone.label} | ")
        if self.saving:
            text.append("Saving...", style="yellow")
        else:
            text.append("Ready", style="green")
        if self.notice is not None:
            text.append(" | ")
            text.append(f"{self.notice.title}: {self.notice.message}", style=NOTICE_STYLES[self.notice.level])
        self.update(text)

    def show_notice(self, notice: Notice) -> None:
        self.notice = notice
        self.update_status()
