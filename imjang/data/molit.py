"""Apartment trade prices from the MOLIT real-transaction open API, with a mock fallback.

The open API needs a service key from data.go.kr. Without one the market price
service serves generated sample trades instead.
"""

import logging
import random
from datetime import datetime, timezone

import httpx

from imjang.config import settings
from imjang.data.base import MarketDataUnavailableError
from imjang.models.record import MarketPrice

logger = logging.getLogger(__name__)

MOLIT_TRADE_URL = "https://apis.data.go.kr/1613000/RTMSDataSvcAptTrade/getRTMSDataSvcAptTrade"

MOCK_APARTMENTS = [
    "래미안 퍼스티지",
    "자이 더 리버",
    "힐스테이트 센트럴",
    "푸르지오 써밋",
    "아이파크 시티",
    "롯데캐슬 골드",
    "e편한세상 그랑",
    "더샵 파크",
]
MOCK_AREAS = [25, 30, 34, 40]
DEFAULT_REGION_SI = "서울"

SQM_PER_PYEONG = 3.3058


def generate_mock_prices(
    region_gu: str,
    year_month: str,
    rng: random.Random | None = None,
    region_si: str = DEFAULT_REGION_SI,
) -> list[MarketPrice]:
    """Sample trades for a district and YYYYMM, newest first.

    5-14 trades, prices 10.0-30.0 억 at one decimal, floors 1-20.
    """
    rng = rng or random.Random()
    fetched_at = datetime.now(timezone.utc)
    count = rng.randint(5, 14)

    prices = []
    for _ in range(count):
        day = rng.randint(1, 28)
        prices.append(MarketPrice(
            region_si=region_si,
            region_gu=region_gu,
            apartment_name=rng.choice(MOCK_APARTMENTS),
            transaction_date=f"{year_month[:4]}.{year_month[4:]}.{day:02d}",
            price_in_hundred_million=round(rng.uniform(10, 30), 1),
            area_pyeong=rng.choice(MOCK_AREAS),
            floor=rng.randint(1, 20),
            fetched_at=fetched_at,
        ))
    return sorted(prices, key=lambda p: p.transaction_date, reverse=True)


def _parse_item(item: dict, region_gu: str, fetched_at: datetime) -> MarketPrice:
    # dealAmount is in 만원 with thousands separators, e.g. "155,000"
    amount_manwon = float(str(item["dealAmount"]).replace(",", "").strip())
    area_sqm = float(item.get("excluUseAr", 0) or 0)
    return MarketPrice(
        region_si=DEFAULT_REGION_SI,
        region_gu=region_gu,
        apartment_name=str(item.get("aptNm", "")).strip(),
        transaction_date=f"{int(item['dealYear']):04d}.{int(item['dealMonth']):02d}.{int(item['dealDay']):02d}",
        price_in_hundred_million=round(amount_manwon / 10000, 2),
        area_pyeong=round(area_sqm / SQM_PER_PYEONG),
        floor=int(item.get("floor", 0) or 0),
        fetched_at=fetched_at,
    )


class MolitClient:
    def __init__(self, api_key: str | None = None):
        self.api_key = api_key if api_key is not None else settings.molit_api_key

    async def fetch_trades(self, region_code: str, year_month: str) -> list[MarketPrice]:
        """Fetch apartment trades for a 5-digit LAWD code and YYYYMM."""
        if not self.api_key:
            raise MarketDataUnavailableError("MOLIT_API_KEY is not configured")

        params = {
            "serviceKey": self.api_key,
            "LAWD_CD": region_code,
            "DEAL_YMD": year_month,
            "numOfRows": 1000,
            "_type": "json",
        }
        try:
            async with httpx.AsyncClient(timeout=15.0) as client:
                resp = await client.get(MOLIT_TRADE_URL, params=params)
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise MarketDataUnavailableError(f"MOLIT request failed: {e}") from e

        items = data.get("response", {}).get("body", {}).get("items") or {}
        rows = items.get("item", []) if isinstance(items, dict) else []
        if isinstance(rows, dict):
            rows = [rows]

        fetched_at = datetime.now(timezone.utc)
        prices = []
        for item in rows:
            try:
                prices.append(_parse_item(item, region_code, fetched_at))
            except (KeyError, ValueError) as e:
                logger.debug("Skipping malformed MOLIT item: %s", e)
        return sorted(prices, key=lambda p: p.transaction_date, reverse=True)
