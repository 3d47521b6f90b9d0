"""Address search via the Kakao Local REST API."""

import logging

import httpx

from imjang.config import settings
from imjang.data.cache import cached_lookup
from imjang.models.record import AddressResult

logger = logging.getLogger(__name__)

KAKAO_ADDRESS_URL = "https://dapi.kakao.com/v2/local/search/address.json"


class KakaoLocalClient:
    def __init__(self, api_key: str | None = None):
        self.api_key = api_key if api_key is not None else settings.kakao_rest_api_key

    @cached_lookup("kakao:address")
    async def _lookup(self, query: str) -> dict | None:
        async with httpx.AsyncClient(timeout=10.0) as client:
            resp = await client.get(
                KAKAO_ADDRESS_URL,
                params={"query": query},
                headers={"Authorization": f"KakaoAK {self.api_key}"},
            )
            resp.raise_for_status()
            data = resp.json()

        documents = data.get("documents") or []
        if not documents:
            return None
        first = documents[0]
        # Kakao returns x = longitude, y = latitude, both as strings
        return {
            "address_name": first.get("address_name", query),
            "latitude": float(first["y"]),
            "longitude": float(first["x"]),
        }

    async def search_address(self, query: str) -> AddressResult | None:
        """Resolve an address to coordinates. Returns None when nothing usable comes back."""
        if not self.api_key:
            logger.error("KAKAO_REST_API_KEY is not configured")
            return None
        if not query or not query.strip():
            return None

        try:
            found = await self._lookup(query.strip())
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.warning("Kakao address search failed for %r: %s", query, e)
            return None

        if found is None:
            return None
        return AddressResult(**found)
