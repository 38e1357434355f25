"""ThingSpeak HTTP client.

Fetches the latest entry or a bounded date range from a channel feed and
hands the records to the normalizer.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import aiohttp

from aqdash.shared.errors import DataShapeError, TransportError
from aqdash.shared.models import Sample
from .config import ThingSpeakConfig
from .normalizer import extract_feeds, normalize_feed, normalize_latest

logger = logging.getLogger(__name__)

# ThingSpeak expects UTC 'YYYY-MM-DD HH:MM:SS' for start/end
RANGE_BOUND_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_range_bound(moment: datetime) -> str:
    """Format a range bound for the feeds API. Naive values are local time."""
    return moment.astimezone(timezone.utc).strftime(RANGE_BOUND_FORMAT)


class ThingSpeakClient:
    """Reads samples from one ThingSpeak channel."""

    def __init__(self, config: ThingSpeakConfig):
        self.config = config
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _channel_url(self, path: str) -> str:
        base = self.config.base_url.rstrip("/")
        return f"{base}/channels/{self.config.channel_id}/{path}"

    async def _get_json(self, path: str, params: Dict[str, str]) -> Any:
        """GET a channel resource and decode its JSON body.

        Raises:
            TransportError: On connection failure, timeout or non-2xx status.
            DataShapeError: If the body is not valid JSON.
        """
        url = self._channel_url(path)
        query = {"api_key": self.config.read_api_key, **params}
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.get(url, params=query) as response:
                    if not 200 <= response.status < 300:
                        raise TransportError(f"HTTP error! status: {response.status}")
                    try:
                        return await response.json(content_type=None)
                    except ValueError as e:
                        raise DataShapeError(f"Response from {path} is not JSON: {e}") from e
        except asyncio.TimeoutError as e:
            raise TransportError(f"Request to {path} timed out") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Request to {path} failed: {e}") from e

    async def get_latest(self) -> Optional[Sample]:
        """Fetch the most recent channel entry.

        The sample is returned even when every metric is empty. Returns None
        only if the provider sent something that is not a feed record.
        """
        payload = await self._get_json("feeds/last.json", {})
        try:
            return normalize_latest(payload, self.config.field_mappings)
        except DataShapeError as e:
            logger.warning(f"Latest entry has unexpected shape: {e}")
            return None

    async def get_range(
        self,
        start: datetime,
        end: datetime,
        limit: Optional[int] = None,
    ) -> List[Sample]:
        """Fetch samples between start and end, oldest first.

        Args:
            start: Start of the range.
            end: End of the range.
            limit: Maximum number of entries, clamped to the provider cap.

        Returns:
            Samples with at least one metric value; empty if nothing matched.
        """
        cap = self.config.results_cap
        results = cap if limit is None else max(1, min(int(limit), cap))
        params = {
            "start": format_range_bound(start),
            "end": format_range_bound(end),
            "results": str(results),
        }
        logger.debug(f"Fetching range {params['start']} .. {params['end']} (results={results})")

        try:
            payload = await self._get_json("feeds.json", params)
            feeds = extract_feeds(payload)
        except DataShapeError as e:
            logger.warning(f"Range response has unexpected shape, treating as empty: {e}")
            return []

        samples = normalize_feed(feeds, self.config.field_mappings)
        logger.info(f"Fetched {len(samples)} samples ({len(feeds)} entries) for range")
        return samples
