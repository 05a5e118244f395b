"""Shared test fixtures for all test modules."""

import asyncio
import itertools
from unittest.mock import AsyncMock

import pytest

from adsmith.models.block import ContentBlock, PersistedId, Zone
from adsmith.models.config import ApiConfig, Config, SiteOption
from adsmith.services.ads_client import AdsApiClient, block_from_wire


@pytest.fixture
def config():
    """Config with a fake API and two sites."""
    return Config(
        api=ApiConfig(base_url="https://api.test.com/api", token="test-token"),
        sites=[
            SiteOption(label="A1 Satta", value="a1satta.pro"),
            SiteOption(label="A3 Satta", value="a3satta.pro"),
        ],
    )


@pytest.fixture
def fake_client():
    """
    AsyncMock ads client.

    upsert_batch echoes the payload back, assigning ids to items sent
    without one, the way the real API does.
    """
    client = AsyncMock(spec=AdsApiClient)
    counter = itertools.count(1)

    async def upsert(site, zone, payload):
        ads = []
        for item in payload:
            item = dict(item)
            item.setdefault("_id", f"srv-{next(counter)}")
            ads.append(item)
        return [block_from_wire(item, site) for item in ads]

    client.list_ads.return_value = []
    client.upsert_batch.side_effect = upsert
    client.delete.return_value = None
    return client


def _persisted(ad_id: str, zone: Zone, order: int, content: str, site: str = "a1satta.pro") -> ContentBlock:
    return ContentBlock(identity=PersistedId(id=ad_id), zone=zone, order=order, content=content, site=site)


async def _wait_for_prompt(prompts, attempts: int = 50):
    for _ in range(attempts):
        if prompts.current is not None:
            return prompts.current
        await asyncio.sleep(0)
    raise AssertionError("No prompt was requested")


@pytest.fixture
def persisted():
    """Factory for persisted blocks shaped like list_ads results."""
    return _persisted


@pytest.fixture
def wait_for_prompt():
    """Coroutine that lets the event loop run until a prompt is outstanding."""
    return _wait_for_prompt
