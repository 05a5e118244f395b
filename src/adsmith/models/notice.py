"""Notice model for user-visible operation results."""

from typing import Literal

from pydantic import BaseModel, Field


class Notice(BaseModel):
    """A user-visible message about the outcome of an operation."""

    level: Literal["info", "success", "error"] = Field(
        default="info",
        description="Severity used by the presentation layer"
    )

    title: str = Field(..., description="Short heading, e.g. 'Error'")

    message: str = Field(..., description="Message body")

    model_config = {"frozen": True}
