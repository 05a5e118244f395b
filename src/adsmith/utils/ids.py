"""Identifier generation for blocks that have not been saved yet."""

import itertools
import uuid


# Process-wide counter; combined with a random suffix so a temp id is never reused
_counter = itertools.count(1)


def generate_temp_id(zone: str) -> str:
    """
    Generate an ephemeral block identifier.

    Format is ``tmp-<zone>-<counter>-<random>``. The counter guarantees
    uniqueness within the process even if the random part collides.

    Args:
        zone: Zone value the block is created in (e.g. "top")

    Returns:
        Temporary identifier string

    Example:
        >>> generate_temp_id("top")
        "tmp-top-1-3f9a2c1b"
    """
    return f"tmp-{zone}-{next(_counter)}-{uuid.uuid4().hex[:8]}"

