"""Single-slot prompt channel between editor operations and the UI.

An operation that needs user input awaits ``PromptQueue.ask(request)``. The
presentation layer watches ``current`` and resolves it through ``submit``,
``cancel`` or ``dismiss``. Only one request is outstanding at a time:

    Idle --ask--> AwaitingInput --submit/cancel/dismiss--> Idle
                  AwaitingInput --ask--> AwaitingInput (old request superseded)

The awaiting operation receives:
- ``Submitted(value)`` when the user submits (confirmations: "yes" / "no")
- ``Cancelled()`` when the user cancels explicitly
- ``None`` when the dialog is dismissed with its close control or the
  request is superseded; the operation must then stop without acting
"""

import asyncio
from typing import Callable, Optional

from adsmith.models.prompt import Cancelled, PromptKind, PromptOutcome, PromptRequest, Submitted
from adsmith.services.exceptions import ValidationFailure
from adsmith.utils.logging import get_logger


logger = get_logger(__name__)

CONFIRM_VALUES = ("yes", "no")


class PromptQueue:
    """Holds at most one outstanding PromptRequest."""

    def __init__(self):
        self._current: Optional[PromptRequest] = None
        self._future: Optional[asyncio.Future] = None
        self._listeners: list[Callable[[Optional[PromptRequest]], None]] = []

    @property
    def current(self) -> Optional[PromptRequest]:
        """Outstanding request, or None when idle."""
        return self._current

    @property
    def is_awaiting(self) -> bool:
        return self._current is not None

    def subscribe(self, callback: Callable[[Optional[PromptRequest]], None]) -> None:
        """Register a callback invoked whenever ``current`` changes."""
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback(self._current)

    def _settle(self, outcome: Optional[PromptOutcome]) -> None:
        future = self._future
        request = self._current
        self._future = None
        self._current = None
        if future is not None and not future.done():
            future.set_result(outcome)
        logger.debug(
            "prompt_resolved",
            title=request.title if request else None,
            outcome=type(outcome).__name__ if outcome is not None else "none",
        )
        self._notify()

    async def ask(self, request: PromptRequest) -> Optional[PromptOutcome]:
        """Present a request and wait for its resolution.

        A request that is still outstanding is superseded: its waiter
        receives None.

        Args:
            request: What to ask the user

        Returns:
            Submitted, Cancelled, or None (dismissed / superseded)
        """
        if self._future is not None and not self._future.done():
            logger.info("prompt_superseded", title=self._current.title if self._current else None)
            self._future.set_result(None)

        future = asyncio.get_running_loop().create_future()
        self._future = future
        self._current = request
        logger.debug("prompt_requested", kind=request.kind.value, title=request.title)
        self._notify()
        try:
            return await future
        except asyncio.CancelledError:
            # Waiting operation was cancelled; take its request down with it
            if self._future is future:
                self._future = None
                self._current = None
                self._notify()
            raise

    def submit(self, value: str) -> None:
        """Resolve the outstanding request with a submitted value.

        CONFIRM requests accept "yes" or "no"; CHOICE requests accept one of
        their tags; TEXT requests accept any string, including "".

        Raises:
            ValidationFailure: If nothing is outstanding or value does not fit the kind
        """
        request = self._current
        if request is None:
            raise ValidationFailure("No prompt is awaiting input")
        if request.kind == PromptKind.CONFIRM and value not in CONFIRM_VALUES:
            raise ValidationFailure(f"Confirmation must be 'yes' or 'no', got {value!r}")
        if request.kind == PromptKind.CHOICE and value not in request.choice_tags():
            raise ValidationFailure(f"{value!r} is not one of {request.choice_tags()}")
        self._settle(Submitted(value=value))

    def confirm(self, answer: bool) -> None:
        """Answer the outstanding CONFIRM request."""
        self.submit("yes" if answer else "no")

    def cancel(self) -> None:
        """Resolve the outstanding request as Cancelled (no-op when idle)."""
        if self._current is not None:
            self._settle(Cancelled())

    def dismiss(self) -> None:
        """Close the outstanding request without an answer (no-op when idle)."""
        if self._current is not None:
            self._settle(None)
