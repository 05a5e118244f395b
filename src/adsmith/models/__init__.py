"""Pydantic data models for adsmith."""

from adsmith.models.block import BlockIdentity, ContentBlock, EphemeralId, PersistedId, Zone
from adsmith.models.notice import Notice
from adsmith.models.prompt import (
    Cancelled,
    PromptChoice,
    PromptKind,
    PromptOutcome,
    PromptRequest,
    Submitted,
)

__all__ = [
    "BlockIdentity",
    "Cancelled",
    "ContentBlock",
    "EphemeralId",
    "Notice",
    "PersistedId",
    "PromptChoice",
    "PromptKind",
    "PromptOutcome",
    "PromptRequest",
    "Submitted",
    "Zone",
]
