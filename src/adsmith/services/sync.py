"""Persistence synchronizer: load, save and delete ads against the API.

Only one save runs at a time across all zones. Responses are applied only
if the active site has not changed since the request was sent (the store's
``generation`` is compared), so a site switch discards stale results.
"""

from typing import Callable

from adsmith.content.parser import parse_html
from adsmith.content.sanitize import sanitize_html
from adsmith.models.block import BlockIdentity, ContentBlock, Zone
from adsmith.models.notice import Notice
from adsmith.models.prompt import PromptRequest, is_confirmed
from adsmith.services.ads_client import AdsApiClient, block_to_wire
from adsmith.services.block_store import BlockStore
from adsmith.services.exceptions import TransportFailure
from adsmith.services.prompt_queue import PromptQueue
from adsmith.services.surfaces import SurfaceRegistry
from adsmith.utils.logging import get_logger


logger = get_logger(__name__)


class PersistenceSynchronizer:
    """Moves block collections between the BlockStore and the ads API."""

    def __init__(
        self,
        store: BlockStore,
        surfaces: SurfaceRegistry,
        prompts: PromptQueue,
        client: AdsApiClient,
        notify: Callable[[Notice], None],
    ):
        """
        Initialize synchronizer.

        Args:
            store: Block store of the active site
            surfaces: Mounted editing surfaces (source of live content)
            prompts: Prompt channel for confirmations
            client: Ads API client
            notify: Sink for user-visible notices
        """
        self.store = store
        self.surfaces = surfaces
        self.prompts = prompts
        self.client = client
        self.notify = notify
        self.saving = False
        self._saving_listeners: list[Callable[[bool], None]] = []
        self._rekey_listeners: list[Callable[[str, str], None]] = []

    def subscribe_saving(self, callback: Callable[[bool], None]) -> None:
        """Register a callback invoked when the saving flag changes."""
        self._saving_listeners.append(callback)

    def subscribe_rekey(self, callback: Callable[[str, str], None]) -> None:
        """Register a callback invoked with (ephemeral_key, persisted_key) after a save."""
        self._rekey_listeners.append(callback)

    def _set_saving(self, saving: bool) -> None:
        self.saving = saving
        for callback in list(self._saving_listeners):
            callback(saving)

    def _error(self, message: str) -> None:
        self.notify(Notice(level="error", title="Error", message=message))

    def _is_stale(self, generation: int, operation: str) -> bool:
        if generation != self.store.generation:
            logger.info("response_discarded", operation=operation, reason="site changed")
            return True
        return False

    def live_content(self, block: ContentBlock) -> str:
        """Content of the block's mounted surface, else its stored content."""
        live = self.surfaces.live_html(block.key)
        return block.content if live is None else live

    async def load(self) -> bool:
        """
        Load every zone of the active site from the API.

        Returns:
            True if the store was filled from a fresh response
        """
        site = self.store.site
        generation = self.store.generation
        logger.info("load_started", site=site)

        try:
            blocks = await self.client.list_ads(site)
        except TransportFailure as e:
            if self._is_stale(generation, "load"):
                return False
            logger.error("load_failed", site=site, error=str(e))
            self.surfaces.clear()
            for zone in Zone:
                self.store.replace_zone(zone, [])
            self._error(f"Failed to load ads for {site}: {e.message}")
            return False

        if self._is_stale(generation, "load"):
            return False

        self.surfaces.clear()
        # Empty first so a block that moved zones is not taken for a duplicate
        for zone in Zone:
            self.store.replace_zone(zone, [])
        for zone in Zone:
            self.store.replace_zone(zone, blocks)
        self.store.loaded = True
        logger.info("load_completed", site=site, count=len(self.store))
        return True

    async def save(self, zone: Zone) -> bool:
        """
        Save one zone: replace its remote collection with the local blocks.

        Content is taken from mounted surfaces where available and
        sanitized. When the zone has blocks and all of them are empty the
        user must confirm first. A save already in flight blocks this one.

        Args:
            zone: Zone to save

        Returns:
            True if the zone was saved and reconciled
        """
        zone = Zone(zone)
        if self.saving:
            logger.info("save_blocked", zone=zone.value)
            self.notify(Notice(level="info", title="Saving", message="A save is already in progress"))
            return False

        self._set_saving(True)
        site = self.store.site
        generation = self.store.generation
        try:
            sent = self.store.zone_blocks(zone)
            contents = [sanitize_html(self.live_content(block)) for block in sent]

            if sent and all(parse_html(content).is_blank() for content in contents):
                outcome = await self.prompts.ask(PromptRequest.confirm(
                    "Confirm Save",
                    f"{zone.value} ads are empty. Save anyway?",
                ))
                if not is_confirmed(outcome):
                    logger.info("save_declined", zone=zone.value, reason="empty")
                    return False
                if self._is_stale(generation, "save"):
                    return False

            payload = [block_to_wire(block, content) for block, content in zip(sent, contents)]
            logger.info("save_started", site=site, zone=zone.value, count=len(payload))

            try:
                response = await self.client.upsert_batch(site, zone, payload)
            except TransportFailure as e:
                logger.error("save_failed", site=site, zone=zone.value, error=str(e))
                self._error(f"Failed to save {zone.value} ads: {e.message}")
                return False

            if self._is_stale(generation, "save"):
                return False

            self._reconcile(zone, sent, response)
            logger.info("save_completed", site=site, zone=zone.value, count=len(response))
            self.notify(Notice(level="success", title="Success", message=f"{zone.label} ads saved successfully!"))
            return True

        finally:
            self._set_saving(False)

    def _reconcile(self, zone: Zone, sent: list[ContentBlock], response: list[ContentBlock]) -> None:
        """Replace the zone with the server's blocks.

        When the response lines up one-to-one with what was sent, surfaces
        of ephemeral blocks move to their new persisted keys, and the local
        order wins: blocks moved or removed while the save was in flight
        stay that way until the next save. Ephemeral blocks added meanwhile
        are kept either way.
        """
        current = self.store.zone_blocks(zone)
        sent_keys = {block.key for block in sent}
        response_keys = {block.key for block in response}
        added_keys = {
            block.key for block in current
            if not block.is_persisted and block.key not in sent_keys and block.key not in response_keys
        }

        if len(response) == len(sent):
            for before, after in zip(sent, response):
                if before.key != after.key:
                    self.surfaces.rekey(before.key, after.key)
                    for callback in list(self._rekey_listeners):
                        callback(before.key, after.key)
            saved = {before.key: after for before, after in zip(sent, response)}
            merged = [
                saved.get(block.key, block) for block in current
                if block.key in saved or block.key in added_keys
            ]
        else:
            logger.warning("save_response_misaligned", zone=zone.value, sent=len(sent), received=len(response))
            merged = list(response) + [block for block in current if block.key in added_keys]

        for index, block in enumerate(merged):
            block.order = index

        self.store.replace_zone(zone, merged)
        self.surfaces.prune(self.store.keys())

    async def save_all(self) -> dict[Zone, bool]:
        """
        Save every zone in order after one confirmation.

        Returns:
            Zone -> whether it was saved (empty when the user declined)
        """
        outcome = await self.prompts.ask(PromptRequest.confirm("Save All", "Save all sections?"))
        if not is_confirmed(outcome):
            logger.info("save_all_declined")
            return {}

        results = {}
        for zone in Zone:
            results[zone] = await self.save(zone)
        logger.info("save_all_completed", results={zone.value: ok for zone, ok in results.items()})
        return results

    async def delete(self, zone: Zone, identity: BlockIdentity) -> bool:
        """
        Delete a block.

        Ephemeral blocks are removed locally without calling the API.
        Persisted blocks need confirmation and are removed locally only
        after the API call succeeded.

        Returns:
            True if the block was removed
        """
        zone = Zone(zone)
        block = self.store.get(zone, identity)
        if block is None:
            logger.debug("delete_skipped", zone=zone.value, key=identity.key)
            return False

        if not block.is_persisted:
            self.store.remove(zone, identity)
            self.surfaces.unmount(block.key)
            return True

        generation = self.store.generation
        outcome = await self.prompts.ask(PromptRequest.confirm(
            "Confirm Delete",
            "Delete this ad permanently from database?",
        ))
        if not is_confirmed(outcome):
            logger.info("delete_declined", key=block.key)
            return False

        try:
            await self.client.delete(block.identity.id)
        except TransportFailure as e:
            logger.error("delete_failed", key=block.key, error=str(e))
            self._error(f"Failed to delete ad: {e.message}")
            return False

        if self._is_stale(generation, "delete"):
            return False

        self.store.remove(zone, identity)
        self.surfaces.unmount(block.key)
        self.notify(Notice(level="success", title="Success", message="Ad deleted successfully!"))
        return True

