"""Main adsmith TUI application.

The app owns one AdsEditor session. On mount it shows the ads editor screen
and loads the active site's ads in a background worker; every later network
call also runs in a worker so the interface stays responsive.
"""

from textual.app import App
from textual.binding import Binding

from adsmith.services.editor import AdsEditor
from adsmith.tui.screens import AdsEditorScreen
from adsmith.utils.logging import get_logger

logger = get_logger(__name__)


class AdsmithApp(App):
    """Ads management console."""

    TITLE = "adsmith"

    CSS = """
    Screen {
        background: $surface;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", show=True, priority=True),
    ]

    def __init__(self, editor: AdsEditor, auto_load: bool = True):
        """Initialize the app.

        Args:
            editor: Editing session to present
            auto_load: Whether to load the site's ads on mount (False for tests)
        """
        super().__init__()
        self.editor = editor
        self.auto_load = auto_load
        logger.info("app_initialized", site=editor.site)

    def on_mount(self) -> None:
        self.push_screen(AdsEditorScreen(self.editor, name="ads_editor"))
        if self.auto_load:
            self.run_worker(self.editor.load(), name="load", exclusive=True)

    async def action_quit(self) -> None:
        logger.info("app_quit", site=self.editor.site)
        self.exit()
