"""Selection positions inside a block's content tree."""

from pydantic import BaseModel, Field


class Position(BaseModel):
    """A point in a content tree.

    ``offset`` is a character offset when ``path`` addresses a text run, a
    child index when it addresses a container, and 0 for an image.
    """

    path: tuple[int, ...] = Field(default=(), description="Node path from the document root")
    offset: int = Field(default=0, ge=0, description="Offset within the addressed node")

    model_config = {"frozen": True}


class Selection(BaseModel):
    """A range between two positions of the same content tree."""

    start: Position
    end: Position

    model_config = {"frozen": True}

    @classmethod
    def caret(cls, path: tuple[int, ...], offset: int = 0) -> "Selection":
        """Collapsed selection at one position."""
        position = Position(path=path, offset=offset)
        return cls(start=position, end=position)

    @classmethod
    def span(cls, start_path: tuple[int, ...], start_offset: int,
             end_path: tuple[int, ...], end_offset: int) -> "Selection":
        return cls(
            start=Position(path=start_path, offset=start_offset),
            end=Position(path=end_path, offset=end_offset),
        )

    @property
    def is_collapsed(self) -> bool:
        return self.start == self.end
