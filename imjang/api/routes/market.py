"""Market price routes."""

from fastapi import APIRouter, Depends, HTTPException, Query

from imjang.api.deps import get_market_price_service
from imjang.api.schemas import MarketPriceResponse
from imjang.data.market_prices import MarketPriceService

router = APIRouter(prefix="/api/v1/market", tags=["market"])


@router.get("/prices", response_model=list[MarketPriceResponse])
async def get_prices(
    region_code: str = Query(..., alias="regionCode"),
    year_month: str = Query(..., alias="yearMonth"),
    service: MarketPriceService = Depends(get_market_price_service),
):
    """Recent apartment trades for a district and month (YYYYMM)."""
    try:
        prices = await service.get_prices(region_code, year_month)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return [MarketPriceResponse.model_validate(p) for p in prices]
