"""Prompt request and outcome models for the modal prompt channel."""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field


class PromptKind(str, Enum):
    """Input shape a prompt request asks for."""

    CONFIRM = "confirm"
    CHOICE = "choice"
    TEXT = "text"


class PromptChoice(BaseModel):
    """One enumerated option of a CHOICE prompt."""

    tag: str = Field(..., description="Value submitted when this option is picked")
    label: str = Field(..., description="Text shown to the user")

    model_config = {"frozen": True}


class PromptRequest(BaseModel):
    """A pending request for user input."""

    kind: PromptKind = Field(..., description="Confirmation, single-choice, or free-text")

    title: str = Field(..., description="Dialog title")

    message: str = Field(default="", description="Prompt text shown above the input")

    default: str = Field(default="", description="Initial value / placeholder for TEXT prompts")

    choices: list[PromptChoice] = Field(
        default_factory=list,
        description="Enumerated options (CHOICE prompts only)"
    )

    model_config = {"frozen": True}

    @classmethod
    def confirm(cls, title: str, message: str) -> "PromptRequest":
        return cls(kind=PromptKind.CONFIRM, title=title, message=message)

    @classmethod
    def choice(cls, title: str, message: str, choices: list[PromptChoice]) -> "PromptRequest":
        return cls(kind=PromptKind.CHOICE, title=title, message=message, choices=choices)

    @classmethod
    def text(cls, title: str, message: str, default: str = "") -> "PromptRequest":
        return cls(kind=PromptKind.TEXT, title=title, message=message, default=default)

    def choice_tags(self) -> list[str]:
        return [choice.tag for choice in self.choices]


class Submitted(BaseModel):
    """The user submitted a value (or answered a confirmation)."""

    value: str

    model_config = {"frozen": True}

    @property
    def confirmed(self) -> bool:
        """True for a "yes" answer to a CONFIRM prompt."""
        return self.value == "yes"


class Cancelled(BaseModel):
    """The user explicitly cancelled the prompt."""

    model_config = {"frozen": True}


PromptOutcome = Union[Submitted, Cancelled]


def is_confirmed(outcome: Optional[PromptOutcome]) -> bool:
    """Return True only for Submitted("yes").

    Args:
        outcome: Result of PromptQueue.ask(); None when dismissed or superseded
    """
    return isinstance(outcome, Submitted) and outcome.confirmed
