"""Modal dialog presenting the outstanding PromptRequest.

The dialog answers the request through the PromptQueue; the screen that
opened it closes it once the queue reports that nothing is outstanding.
Escape is the close control: the request is dismissed without an answer.
"""

from textual import events
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, OptionList, Static
from textual.widgets.option_list import Option

from adsmith.models.prompt import PromptKind, PromptRequest
from adsmith.services.prompt_queue import PromptQueue


class PromptDialog(ModalScreen[None]):
    """Modal dialog for one confirm, choice, or text request."""

    DEFAULT_CSS = """
    PromptDialog {
        align: center middle;
    }

    #prompt-panel {
        width: 64;
        height: auto;
        background: $panel;
        border: round $secondary;
        padding: 1 2;
    }

    #prompt-title {
        text-style: bold;
        padding-bottom: 1;
    }

    #prompt-message {
        padding-bottom: 1;
    }

    #prompt-choices {
        height: auto;
        max-height: 10;
    }

    #prompt-buttons {
        height: auto;
        align-horizontal: right;
    }

    #prompt-buttons Button {
        margin-left: 1;
    }
    """

    def __init__(self, prompts: PromptQueue, request: PromptRequest) -> None:
        super().__init__()
        self.prompts = prompts
        self.request = request

    def compose(self) -> ComposeResult:
        request = self.request
        with Vertical(id="prompt-panel"):
            yield Static(request.title, id="prompt-title")
            if request.message:
                yield Static(request.message, id="prompt-message")

            if request.kind == PromptKind.CHOICE:
                yield OptionList(
                    *[Option(f"{choice.tag}. {choice.label}", id=choice.tag) for choice in request.choices],
                    id="prompt-choices",
                )
            elif request.kind == PromptKind.TEXT:
                yield Input(value=request.default, id="prompt-input")

            with Horizontal(id="prompt-buttons"):
                # Confirmations resolve to yes or no only
                if request.kind == PromptKind.CONFIRM:
                    yield Button("Yes", id="prompt-yes", variant="primary")
                    yield Button("No", id="prompt-no")
                else:
                    if request.kind == PromptKind.TEXT:
                        yield Button("OK", id="prompt-ok", variant="primary")
                    yield Button("Cancel", id="prompt-cancel")

    def on_mount(self) -> None:
        if self.request.kind == PromptKind.CHOICE:
            self.query_one("#prompt-choices", OptionList).focus()
        elif self.request.kind == PromptKind.TEXT:
            self.query_one("#prompt-input", Input).focus()
        else:
            self.query_one("#prompt-yes", Button).focus()

    def _is_current(self) -> bool:
        return self.prompts.current is self.request

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if not self._is_current():
            return
        if event.button.id == "prompt-yes":
            self.prompts.confirm(True)
        elif event.button.id == "prompt-no":
            self.prompts.confirm(False)
        elif event.button.id == "prompt-ok":
            self.prompts.submit(self.query_one("#prompt-input", Input).value)
        elif event.button.id == "prompt-cancel":
            self.prompts.cancel()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        if self._is_current():
            self.prompts.submit(event.value)

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        if self._is_current() and event.option_id is not None:
            self.prompts.submit(event.option_id)

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            event.stop()
            if self._is_current():
                self.prompts.dismiss()
