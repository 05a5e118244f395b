"""Editor facade: the entry points the presentation layer calls.

``AdsEditor`` wires the block store, editing surfaces, selection tracker,
prompt queue, annotation engine and persistence synchronizer together for
one editing session. Failures of a single operation never escape: they are
logged and turned into error notices.
"""

from typing import Callable, Optional

from adsmith.content.nodes import NodePath
from adsmith.models.block import BlockIdentity, ContentBlock, Zone
from adsmith.models.config import Config
from adsmith.models.notice import Notice
from adsmith.models.prompt import PromptChoice, PromptOutcome, PromptRequest, Submitted, is_confirmed
from adsmith.models.selection import Selection
from adsmith.services import formatting
from adsmith.services.ads_client import AdsApiClient
from adsmith.services.annotation import AnnotationEngine, AnnotationResult, make_link
from adsmith.services.block_store import BlockStore
from adsmith.services.exceptions import TransportFailure, ValidationFailure
from adsmith.services.formatting import InlineStyle
from adsmith.services.prompt_queue import PromptQueue
from adsmith.services.selection import SelectionTracker
from adsmith.services.surfaces import EditingSurface, SurfaceRegistry
from adsmith.services.sync import PersistenceSynchronizer
from adsmith.utils.logging import bind_site, get_logger


logger = get_logger(__name__)

# Notices kept for display
MAX_NOTICES = 50


class AdsEditor:
    """One editing session over the ads of the active site."""

    def __init__(self, config: Config, site: Optional[str] = None, client: Optional[AdsApiClient] = None):
        """
        Initialize editor.

        Args:
            config: Loaded configuration
            site: Initial site (defaults to the first configured site)
            client: API client (defaults to one built from config.api)

        Raises:
            ValidationFailure: If site is not one of the configured sites
        """
        self.config = config
        site = site or config.sites[0].value
        if site not in config.site_values():
            raise ValidationFailure(f"Unknown site: {site}")

        self.store = BlockStore(site)
        bind_site(site)
        self.surfaces = SurfaceRegistry()
        self.tracker = SelectionTracker()
        self.prompts = PromptQueue()
        self.engine = AnnotationEngine(self.prompts, self.tracker)
        self.client = client or AdsApiClient(config.api)
        self.sync = PersistenceSynchronizer(self.store, self.surfaces, self.prompts, self.client, self.post_notice)

        self.notices: list[Notice] = []
        self._notice_listeners: list[Callable[[Notice], None]] = []

        self.store.subscribe(self._on_store_changed)
        self.sync.subscribe_rekey(self.engine.rekey)

    @property
    def site(self) -> str:
        return self.store.site

    @property
    def saving(self) -> bool:
        return self.sync.saving

    @property
    def blocks(self) -> dict[Zone, list[ContentBlock]]:
        return self.store.blocks

    def subscribe_notices(self, callback: Callable[[Notice], None]) -> None:
        self._notice_listeners.append(callback)

    def post_notice(self, notice: Notice) -> None:
        """Record a user-visible notice and pass it to listeners."""
        self.notices.append(notice)
        del self.notices[:-MAX_NOTICES]
        logger.debug("notice_posted", level=notice.level, title=notice.title, message=notice.message)
        for callback in list(self._notice_listeners):
            callback(notice)

    def _report(self, operation: str, error: Exception) -> None:
        logger.warning("operation_failed", operation=operation, error_type=type(error).__name__, error=str(error))
        self.post_notice(Notice(level="error", title="Error", message=str(error)))

    def _on_store_changed(self, zone: Optional[Zone]) -> None:
        for surface in self.surfaces.prune(self.store.keys()):
            self.tracker.forget(surface)
            self.engine.forget(surface.block_key)

    def surface(self, block: ContentBlock) -> EditingSurface:
        """Editing surface of a block, mounted on first use."""
        return self.surfaces.mount(block.key, block.content)

    def focus(self, block: ContentBlock) -> EditingSurface:
        """Give focus to a block's surface and track it as the editing point."""
        surface = self.surface(block)
        surface.focus()
        self.tracker.track(surface)
        return surface

    def select(self, block: ContentBlock, selection: Optional[Selection]) -> EditingSurface:
        """Set the selection inside a block (from a user interaction)."""
        surface = self.focus(block)
        surface.select(selection)
        return surface

    async def _ask_at(self, surface: EditingSurface, request: PromptRequest) -> Optional[PromptOutcome]:
        """Ask a question, keeping the surface's editing point across the prompt."""
        self.tracker.capture()
        try:
            return await self.prompts.ask(request)
        finally:
            self.tracker.restore_and_focus(surface)

    def add(self, zone: Zone) -> ContentBlock:
        """Append an empty block to a zone."""
        return self.store.add(zone)

    def remove(self, zone: Zone, identity: BlockIdentity) -> bool:
        """Remove a block from the local collection (the API is not called)."""
        return self.store.remove(zone, identity) is not None

    def reorder(self, zone: Zone, from_index: int, to_index: int) -> bool:
        try:
            self.store.reorder(zone, from_index, to_index)
        except ValidationFailure as e:
            self._report("reorder", e)
            return False
        return True

    def set_content(self, zone: Zone, identity: BlockIdentity, content: str) -> bool:
        """Replace a block's content; a mounted surface is reloaded with it."""
        if not self.store.set_content(zone, identity, content):
            return False
        surface = self.surfaces.get(identity.key)
        if surface is not None and surface.html != content:
            surface.load_html(content)
        return True

    async def quick_add(self) -> Optional[ContentBlock]:
        """Ask for a section, then add an empty block to it."""
        outcome = await self.prompts.ask(PromptRequest.choice(
            "Quick Add",
            "Which section?",
            [PromptChoice(tag=zone.value, label=zone.label) for zone in Zone],
        ))
        if not isinstance(outcome, Submitted):
            return None
        return self.add(Zone(outcome.value))

    async def load(self) -> bool:
        try:
            return await self.sync.load()
        except (ValidationFailure, TransportFailure) as e:
            self._report("load", e)
            return False

    async def save(self, zone: Zone) -> bool:
        try:
            return await self.sync.save(zone)
        except (ValidationFailure, TransportFailure) as e:
            self._report("save", e)
            return False

    async def save_all(self) -> dict[Zone, bool]:
        try:
            return await self.sync.save_all()
        except (ValidationFailure, TransportFailure) as e:
            self._report("save_all", e)
            return {}

    async def delete(self, zone: Zone, identity: BlockIdentity) -> bool:
        try:
            return await self.sync.delete(zone, identity)
        except (ValidationFailure, TransportFailure) as e:
            self._report("delete", e)
            return False

    async def switch_site(self, site: str) -> bool:
        """Make another site active and load its ads.

        Any outstanding prompt is dismissed, and responses still in flight
        for the previous site are discarded when they arrive.
        """
        if site not in self.config.site_values():
            self._report("switch_site", ValidationFailure(f"Unknown site: {site}"))
            return False
        self.prompts.dismiss()
        self.engine.forget()
        self.store.set_site(site)
        bind_site(site)
        return await self.load()

    def pick(self, block: ContentBlock, path: NodePath) -> bool:
        """Directly select the image at path inside a block."""
        try:
            self.engine.pick(self.surface(block), path)
        except ValidationFailure as e:
            self._report("pick", e)
            return False
        return True

    async def attach_link(self, block: ContentBlock, href: Optional[str] = None) -> Optional[AnnotationResult]:
        """Link the image the user means, asking for the URL when href is None."""
        try:
            return await self.engine.attach_link(self.surface(block), href)
        except ValidationFailure as e:
            self._report("attach_link", e)
            return None

    def detach_link(self, block: ContentBlock) -> Optional[AnnotationResult]:
        try:
            return self.engine.detach_link(self.surface(block))
        except ValidationFailure as e:
            self._report("detach_link", e)
            return None

    async def apply_inline_style(
        self, block: ContentBlock, style: InlineStyle, color: Optional[str] = None
    ) -> bool:
        """Style the selected text; a text color is asked for when not given."""
        surface = self.focus(block)
        try:
            if InlineStyle(style) == InlineStyle.COLOR and color is None:
                outcome = await self._ask_at(surface, PromptRequest.text(
                    "Text Color", "Enter color (e.g., red, #ff0000):"
                ))
                if not isinstance(outcome, Submitted) or not outcome.value.strip():
                    return False
                color = outcome.value
            else:
                self.tracker.restore_and_focus(surface)
            formatting.apply_inline_style(surface, style, color)
        except ValidationFailure as e:
            self._report("apply_inline_style", e)
            return False
        return True

    async def insert_text(self, block: ContentBlock, text: Optional[str] = None) -> bool:
        """Insert text at the editing point; an emoji is asked for when not given."""
        surface = self.focus(block)
        try:
            if text is None:
                outcome = await self._ask_at(surface, PromptRequest.text("Insert Emoji", "Enter emoji:"))
                if not isinstance(outcome, Submitted) or not outcome.value:
                    return False
                text = outcome.value
            formatting.insert_text(surface, text)
        except ValidationFailure as e:
            self._report("insert_text", e)
            return False
        return True

    async def insert_image(
        self,
        block: ContentBlock,
        src: str,
        href: Optional[str] = None,
        ask_link: bool = False,
    ) -> bool:
        """
        Insert an image at the editing point.

        Args:
            block: Block to insert into
            src: Image URL
            href: Link to wrap the image in
            ask_link: When href is None, offer to add a link after inserting
        """
        surface = self.focus(block)
        try:
            if not src or not src.strip():
                raise ValidationFailure("Image address is empty")
            image = formatting.image_node(src.strip(), self.config.editor.default_image_width)
            node = make_link(href, [image]) if href else image
            path = formatting.insert_node(surface, node)
            logger.info("image_inserted", block_key=surface.block_key, linked=bool(href))

            if href is None and ask_link:
                outcome = await self._ask_at(surface, PromptRequest.confirm(
                    "Add Link", "Add link to this image?"
                ))
                if is_confirmed(outcome):
                    surface.select(Selection.caret(path))
                    await self.engine.attach_link(surface)
        except ValidationFailure as e:
            self._report("insert_image", e)
            return False
        return True

    async def resize_last_image(self, block: ContentBlock, width: Optional[int] = None) -> bool:
        """Resize the block's last image; a preset width is asked for when not given."""
        surface = self.focus(block)
        try:
            if width is None:
                widths = self.config.editor.image_widths
                outcome = await self._ask_at(surface, PromptRequest.choice(
                    "Resize Image",
                    "Choose image width:",
                    [PromptChoice(tag=str(w), label=f"{w}px") for w in widths],
                ))
                if not isinstance(outcome, Submitted):
                    return False
                width = int(outcome.value)
            formatting.resize_last_image(surface, width)
        except ValidationFailure as e:
            self._report("resize_last_image", e)
            return False
        return True
