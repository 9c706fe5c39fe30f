"""Moderation / Geocoding Oracle Implementations"""

import logging
from typing import Optional, Tuple
import httpx
from src.app.services.oracles import GeocodingOracle, ModerationOracle
from src.domain.moderation import ModerationStatus

logger = logging.getLogger(__name__)


class AutoApproveModerationOracle(ModerationOracle):
    """
    Moderation oracle that approves everything

    Stand-in for the external moderation service in development and tests.
    """

    async def moderate_text(self, text: str) -> ModerationStatus:
        logger.info(f"[MODERATION] Auto-approving text ({len(text or '')} chars)")
        return ModerationStatus.APPROVED

    async def moderate_image(self, image_id: str) -> ModerationStatus:
        logger.info(f"[MODERATION] Auto-approving image {image_id}")
        return ModerationStatus.APPROVED


class NullGeocodingOracle(GeocodingOracle):
    """Geocoder used when no geocoding endpoint is configured"""

    async def geocode(self, address: str) -> Optional[Tuple[float, float]]:
        logger.warning(f"[GEOCODING] No geocoder configured, cannot resolve '{address}'")
        return None


class HttpGeocodingOracle(GeocodingOracle):
    """
    Geocoder backed by a Nominatim-compatible search endpoint

    GET <url>?q=<address>&format=json returning [{"lat": "...", "lon": "..."}]
    """

    def __init__(self, url: str, timeout: float = 10.0):
        self.url = url
        self.timeout = timeout

    async def geocode(self, address: str) -> Optional[Tuple[float, float]]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(
                self.url,
                params={"q": address, "format": "json", "limit": 1},
                headers={"Accept": "application/json"},
            )
            response.raise_for_status()
            results = response.json()

        if not results:
            logger.warning(f"[GEOCODING] No result for '{address}'")
            return None

        return float(results[0]["lat"]), float(results[0]["lon"])


def create_geocoding_oracle(url: Optional[str] = None) -> GeocodingOracle:
    if url:
        return HttpGeocodingOracle(url)
    return NullGeocodingOracle()
