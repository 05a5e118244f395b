"""HTTP client for the ads persistence API.

Endpoints (relative to ``api.base_url``):
- ``GET    /ads?site=<site>``   list every ad of a site
- ``POST   /ads?site=<site>``   replace one zone's ads, returns ``{"ads": [...]}``
- ``DELETE /ads/<id>``          delete one persisted ad

Ads on the wire carry ``_id`` (or ``id``), ``content``, ``position`` (the
zone), ``order`` and ``site``.
"""

from typing import Any, Optional

import httpx

from adsmith.models.block import ContentBlock, PersistedId, Zone
from adsmith.models.config import ApiConfig
from adsmith.services.exceptions import TransportFailure
from adsmith.utils.logging import get_logger


logger = get_logger(__name__)


def block_from_wire(item: Any, site: str) -> ContentBlock:
    """Convert one API ad into a persisted ContentBlock.

    The server's identity field (``id`` or ``_id``) becomes the block's
    canonical PersistedId.

    Raises:
        ValueError: If the item is not an ad object
    """
    if not isinstance(item, dict):
        raise ValueError(f"Expected an ad object, got {type(item).__name__}")
    identifier = item.get("id") or item.get("_id")
    if not identifier:
        raise ValueError("Ad has no id")
    try:
        zone = Zone(item.get("position"))
    except ValueError:
        raise ValueError(f"Ad {identifier} has unknown position {item.get('position')!r}")
    order = item.get("order")
    return ContentBlock(
        identity=PersistedId(id=str(identifier)),
        zone=zone,
        order=order if isinstance(order, int) and order >= 0 else 0,
        content=item.get("content") or "",
        site=item.get("site") or site,
    )


def block_to_wire(block: ContentBlock, content: Optional[str] = None) -> dict:
    """Build the upsert payload item for a block.

    Ephemeral blocks are sent without ``_id`` so the server assigns one.
    """
    payload = {
        "content": block.content if content is None else content,
        "position": block.zone.value,
        "order": block.order,
        "site": block.site,
    }
    if block.is_persisted:
        payload["_id"] = block.identity.id
    return payload


class AdsApiClient:
    """
    Async client for the ads API.

    Every call opens a short-lived ``httpx.AsyncClient``. Network errors,
    HTTP error statuses and malformed bodies are raised as TransportFailure.
    """

    def __init__(self, config: ApiConfig):
        """
        Initialize API client.

        Args:
            config: API configuration (base URL, token, timeout)
        """
        self.config = config
        self.timeout = httpx.Timeout(config.timeout)

    @property
    def base_url(self) -> str:
        return str(self.config.base_url).rstrip("/")

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"
        return headers

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Optional[Any] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("api_request", operation=operation, method=method, url=url)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method, url, params=params, json=json, headers=self._headers()
                )
                response.raise_for_status()
                if response.status_code == 204 or not response.content:
                    return None
                return response.json()

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error("api_http_error", operation=operation, status_code=status, error=str(e))
            raise TransportFailure(operation, f"Server returned HTTP {status}", status_code=status) from e

        except httpx.TimeoutException as e:
            logger.error("api_timeout", operation=operation, error=str(e))
            raise TransportFailure(operation, "Request timed out") from e

        except httpx.HTTPError as e:
            logger.error("api_request_failed", operation=operation, error=str(e))
            raise TransportFailure(operation, str(e) or type(e).__name__) from e

        except ValueError as e:
            logger.error("api_invalid_json", operation=operation, error=str(e))
            raise TransportFailure(operation, "Server returned invalid JSON") from e

    async def list_ads(self, site: str) -> list[ContentBlock]:
        """
        List every ad of a site.

        Args:
            site: Site domain

        Returns:
            Persisted blocks for all zones, in server order

        Raises:
            TransportFailure: On network, HTTP, or body-shape errors
        """
        data = await self._request("list", "GET", "/ads", params={"site": site})
        if isinstance(data, dict) and isinstance(data.get("ads"), list):
            data = data["ads"]
        if not isinstance(data, list):
            raise TransportFailure("list", "Expected a list of ads")
        try:
            blocks = [block_from_wire(item, site) for item in data]
        except ValueError as e:
            raise TransportFailure("list", str(e)) from e

        logger.info("ads_listed", site=site, count=len(blocks))
        return blocks

    async def upsert_batch(self, site: str, zone: Zone, payload: list[dict]) -> list[ContentBlock]:
        """
        Persist a full replacement of one zone.

        Args:
            site: Site domain
            zone: Zone being replaced
            payload: Wire items built with block_to_wire

        Returns:
            Canonical blocks with server-assigned identities

        Raises:
            TransportFailure: On network, HTTP, or body-shape errors
        """
        data = await self._request("upsert", "POST", "/ads", params={"site": site}, json=payload)
        if not isinstance(data, dict) or not isinstance(data.get("ads"), list):
            raise TransportFailure("upsert", "Expected a response with an 'ads' list")
        try:
            blocks = [block_from_wire(item, site) for item in data["ads"]]
        except ValueError as e:
            raise TransportFailure("upsert", str(e)) from e

        logger.info("ads_upserted", site=site, zone=Zone(zone).value, sent=len(payload), received=len(blocks))
        return blocks

    async def delete(self, ad_id: str) -> None:
        """
        Delete one persisted ad.

        Raises:
            TransportFailure: On network or HTTP errors
        """
        await self._request("delete", "DELETE", f"/ads/{ad_id}")
        logger.info("ad_deleted", ad_id=ad_id)
