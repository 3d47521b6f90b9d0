"""Market price lookup: stored trades first, then the external source.

Flow: store → MOLIT (when configured) → generated sample trades → store
"""

import logging
import random
import re

from imjang.data.base import MarketDataUnavailableError, MarketPriceSource, MarketPriceStore
from imjang.data.molit import generate_mock_prices
from imjang.models.record import MarketPrice

logger = logging.getLogger(__name__)

_YEAR_MONTH = re.compile(r"^\d{4}(0[1-9]|1[0-2])$")


def validate_market_query(region_code: str, year_month: str) -> None:
    if not region_code or not region_code.strip():
        raise ValueError("Missing regionCode")
    if not year_month or not _YEAR_MONTH.match(year_month):
        raise ValueError(f"yearMonth must be YYYYMM, got {year_month!r}")


class MarketPriceService:
    def __init__(
        self,
        store: MarketPriceStore,
        source: MarketPriceSource | None = None,
        rng: random.Random | None = None,
    ):
        self.store = store
        self.source = source
        self.rng = rng

    async def _fetch_external(self, region_code: str, year_month: str) -> list[MarketPrice]:
        if self.source is not None:
            try:
                return await self.source.fetch_trades(region_code, year_month)
            except MarketDataUnavailableError as e:
                logger.info("External market data unavailable, using sample trades: %s", e)
        return generate_mock_prices(region_code, year_month, rng=self.rng)

    async def get_prices(self, region_code: str, year_month: str) -> list[MarketPrice]:
        validate_market_query(region_code, year_month)

        stored = await self.store.find(region_code, year_month)
        if stored:
            logger.debug("Serving %d stored trades for %s/%s", len(stored), region_code, year_month)
            return stored

        fetched = await self._fetch_external(region_code, year_month)
        if fetched:
            try:
                await self.store.save_many(fetched)
            except Exception as e:
                logger.warning("Failed to store market prices for %s/%s: %s", region_code, year_month, e)
        return fetched
