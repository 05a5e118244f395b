"""BlockList widget listing the ads of one zone in order."""

from typing import Optional

from rich.text import Text
from textual.widgets import ListItem, ListView, Static

from adsmith.content.nodes import Image, Link
from adsmith.content.parser import parse_html
from adsmith.models.block import ContentBlock

PREVIEW_LENGTH = 60


def block_preview(block: ContentBlock) -> Text:
    """One-line summary of a block: order, text excerpt, image/link counts."""
    document = parse_html(block.content)
    excerpt = " ".join(document.text_content().split())
    if len(excerpt) > PREVIEW_LENGTH:
        excerpt = excerpt[:PREVIEW_LENGTH - 1] + "…"

    text = Text()
    text.append(f"{block.order + 1}. ", style="bold")
    text.append(excerpt or "(empty)", style="" if excerpt else "dim italic")

    images = len(document.find_all(Image))
    links = len(document.find_all(Link))
    if images:
        text.append(f"  [{images} img]", style="cyan")
    if links:
        text.append(f"  [{links} link]", style="blue")
    if not block.is_persisted:
        text.append("  unsaved", style="yellow")
    return text


class BlockListItem(ListItem):
    """A single ad in the zone list."""

    def __init__(self, block: ContentBlock):
        super().__init__()
        self.block = block

    def compose(self):
        yield Static(block_preview(self.block))

    def update_block(self, block: ContentBlock) -> None:
        """Show a newer version of the same block."""
        self.block = block
        for static in self.query(Static):
            static.update(block_preview(block))


class BlockList(ListView):
    """Ordered list of the blocks of the current zone."""

    def __init__(self, **kwargs):
        super().__init__(id="block-list", **kwargs)
        self.blocks: list[ContentBlock] = []
        self._items: list[BlockListItem] = []

    def show_blocks(self, blocks: list[ContentBlock], index: Optional[int] = None) -> None:
        """Show blocks, reusing the existing rows and keeping the highlight where possible."""
        blocks = list(blocks)
        target = self.index if index is None else index

        for item, block in zip(self._items, blocks):
            item.update_block(block)
        for block in blocks[len(self._items):]:
            item = BlockListItem(block)
            self._items.append(item)
            self.append(item)
        for item in self._items[len(blocks):]:
            item.remove()
        del self._items[len(blocks):]

        self.blocks = blocks
        if blocks:
            self.index = min(max(target or 0, 0), len(blocks) - 1)
        else:
            self.index = None

    def get_current_block(self) -> Optional[ContentBlock]:
        """The highlighted block, if any."""
        if self.index is None or not (0 <= self.index < len(self.blocks)):
            return None
        return self.blocks[self.index]
