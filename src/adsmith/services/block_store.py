"""Block store: ordered ad blocks per zone for the active site.

Invariants kept by every operation:
- within a zone, ``order`` values are exactly 0..n-1 in list order
- each identity appears at most once across all zones
- all blocks belong to the active site
"""

from typing import Callable, Iterable, Optional

from adsmith.models.block import BlockIdentity, ContentBlock, EphemeralId, Zone
from adsmith.services.exceptions import ValidationFailure
from adsmith.utils.ids import generate_temp_id
from adsmith.utils.logging import get_logger


logger = get_logger(__name__)


class BlockStore:
    """Owns all content blocks of the active site, grouped by zone."""

    def __init__(self, site: str):
        """Initialize an empty, unloaded store.

        Args:
            site: Active site (tenant domain)
        """
        self.site = site
        self.loaded = False
        # Incremented on every site switch; in-flight responses compare against it
        self.generation = 0
        self._zones: dict[Zone, list[ContentBlock]] = {zone: [] for zone in Zone}
        self._listeners: list[Callable[[Optional[Zone]], None]] = []

    @property
    def blocks(self) -> dict[Zone, list[ContentBlock]]:
        """Read-only view: zone -> copy of its ordered blocks."""
        return {zone: list(blocks) for zone, blocks in self._zones.items()}

    def zone_blocks(self, zone: Zone) -> list[ContentBlock]:
        return list(self._zones[Zone(zone)])

    def __len__(self) -> int:
        return sum(len(blocks) for blocks in self._zones.values())

    def subscribe(self, callback: Callable[[Optional[Zone]], None]) -> None:
        """Register a callback invoked with the changed zone (None = all zones)."""
        self._listeners.append(callback)

    def _notify(self, zone: Optional[Zone]) -> None:
        for callback in list(self._listeners):
            callback(zone)

    def _reindex(self, zone: Zone) -> None:
        for index, block in enumerate(self._zones[zone]):
            block.order = index

    def _index_of(self, zone: Zone, identity: BlockIdentity) -> Optional[int]:
        for index, block in enumerate(self._zones[zone]):
            if block.identity == identity:
                return index
        return None

    def get(self, zone: Zone, identity: BlockIdentity) -> Optional[ContentBlock]:
        index = self._index_of(Zone(zone), identity)
        return None if index is None else self._zones[Zone(zone)][index]

    def find(self, identity: BlockIdentity) -> Optional[ContentBlock]:
        """Look up a block by identity in any zone."""
        for zone in Zone:
            block = self.get(zone, identity)
            if block is not None:
                return block
        return None

    def find_by_key(self, block_key: str) -> Optional[ContentBlock]:
        for blocks in self._zones.values():
            for block in blocks:
                if block.key == block_key:
                    return block
        return None

    def keys(self) -> set[str]:
        """Identity keys of every block in the store."""
        return {block.key for blocks in self._zones.values() for block in blocks}

    def add(self, zone: Zone) -> ContentBlock:
        """Append an empty block with a fresh ephemeral identity.

        Returns:
            The new block
        """
        zone = Zone(zone)
        block = ContentBlock(
            identity=EphemeralId(temp_id=generate_temp_id(zone.value)),
            zone=zone,
            order=len(self._zones[zone]),
            content="",
            site=self.site,
        )
        self._zones[zone].append(block)
        logger.info("block_added", zone=zone.value, key=block.key, order=block.order)
        self._notify(zone)
        return block

    def remove(self, zone: Zone, identity: BlockIdentity) -> Optional[ContentBlock]:
        """Remove the block with identity from zone and re-index the rest.

        Removing an identity that is not present is a no-op.

        Returns:
            The removed block, or None
        """
        zone = Zone(zone)
        index = self._index_of(zone, identity)
        if index is None:
            logger.debug("block_remove_skipped", zone=zone.value, key=identity.key)
            return None
        block = self._zones[zone].pop(index)
        self._reindex(zone)
        logger.info("block_removed", zone=zone.value, key=identity.key)
        self._notify(zone)
        return block

    def reorder(self, zone: Zone, from_index: int, to_index: int) -> None:
        """Move one block within its zone.

        Raises:
            ValidationFailure: If either index is out of range (nothing changes)
        """
        zone = Zone(zone)
        blocks = self._zones[zone]
        size = len(blocks)
        if not (0 <= from_index < size and 0 <= to_index < size):
            raise ValidationFailure(
                f"Cannot move {zone.value} ad from position {from_index} to {to_index}: "
                f"zone has {size} ad(s)"
            )
        if from_index == to_index:
            return
        block = blocks.pop(from_index)
        blocks.insert(to_index, block)
        self._reindex(zone)
        logger.info("block_reordered", zone=zone.value, key=block.key, from_index=from_index, to_index=to_index)
        self._notify(zone)

    def set_content(self, zone: Zone, identity: BlockIdentity, content: str) -> bool:
        """Replace a block's stored content.

        Returns:
            False if the block does not exist
        """
        block = self.get(zone, identity)
        if block is None:
            return False
        block.content = content
        self._notify(Zone(zone))
        return True

    def replace_zone(self, zone: Zone, blocks: Iterable[ContentBlock]) -> None:
        """Replace a zone's collection wholesale (after load or save).

        Blocks from other zones are ignored. The rest are stable-sorted by
        ``order`` (ties keep their input position), duplicate identities
        are dropped (first one wins), and ``order`` is re-indexed.
        """
        zone = Zone(zone)
        incoming = [block for block in blocks if block.zone == zone]
        incoming.sort(key=lambda block: block.order)

        # Identities held by the other zones must not be duplicated here
        taken = {
            block.identity
            for other, other_blocks in self._zones.items() if other != zone
            for block in other_blocks
        }
        accepted: list[ContentBlock] = []
        seen = set()
        for block in incoming:
            if block.identity in seen or block.identity in taken:
                logger.warning("block_duplicate_dropped", zone=zone.value, key=block.key)
                continue
            seen.add(block.identity)
            accepted.append(block)

        self._zones[zone] = accepted
        self._reindex(zone)
        logger.info("zone_replaced", zone=zone.value, count=len(accepted))
        self._notify(zone)

    def set_site(self, site: str) -> None:
        """Switch the active site: clear every zone and mark the store unloaded."""
        previous = self.site
        self.site = site
        self.loaded = False
        self.generation += 1
        for zone in Zone:
            self._zones[zone] = []
        logger.info("site_switched", previous=previous, site=site, generation=self.generation)
        self._notify(None)
