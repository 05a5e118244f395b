"""ContentBlock model and block identities."""

from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, Field


class Zone(str, Enum):
    """Placement zone owning an independently ordered collection of blocks."""

    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"

    @property
    def label(self) -> str:
        """Capitalized zone name for display ("Top", "Middle", ...)."""
        return self.value.capitalize()


class PersistedId(BaseModel):
    """Stable, server-issued block identity."""

    kind: Literal["persisted"] = "persisted"
    id: str = Field(..., min_length=1, description="Identifier assigned by the ads API")

    model_config = {"frozen": True}

    @property
    def key(self) -> str:
        return self.id

    def __str__(self) -> str:
        return self.id


class EphemeralId(BaseModel):
    """Locally generated identity for a block that was never saved."""

    kind: Literal["ephemeral"] = "ephemeral"
    temp_id: str = Field(..., min_length=1, description="Process-unique temporary identifier")

    model_config = {"frozen": True}

    @property
    def key(self) -> str:
        return self.temp_id

    def __str__(self) -> str:
        return self.temp_id


BlockIdentity = Union[PersistedId, EphemeralId]


class ContentBlock(BaseModel):
    """One ad: rich HTML content placed at an order within a zone of a site."""

    identity: BlockIdentity = Field(
        ...,
        discriminator="kind",
        description="Persisted (server id) or ephemeral (unsaved) identity"
    )

    zone: Zone = Field(
        ...,
        description="Placement zone that owns this block"
    )

    order: int = Field(
        default=0,
        ge=0,
        description="Dense zero-based rank within the zone"
    )

    content: str = Field(
        default="",
        description="Serialized rich content (inline HTML)"
    )

    site: str = Field(
        ...,
        description="Tenant/domain the block belongs to"
    )

    model_config = {"frozen": False}  # Store re-indexes order and edits content in place

    @property
    def key(self) -> str:
        """Mapping key for this block's identity."""
        return self.identity.key

    @property
    def is_persisted(self) -> bool:
        return isinstance(self.identity, PersistedId)
