"""Region search history and address lookup routes."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from imjang.api.deps import get_address_search, get_search_history_store
from imjang.api.schemas import AddressResponse, SearchHistoryCreate, SearchHistoryResponse
from imjang.config import settings
from imjang.core.session import Session
from imjang.data.base import AddressSearch, SearchHistoryStore

router = APIRouter(prefix="/api/v1/search", tags=["search"])


@router.get("/history", response_model=list[SearchHistoryResponse])
async def recent_searches(
    ctx: Session,
    store: SearchHistoryStore = Depends(get_search_history_store),
):
    rows = await store.recent(ctx, limit=settings.history_limit)
    return [SearchHistoryResponse.model_validate(r) for r in rows]


@router.post("/history", response_model=SearchHistoryResponse | None, status_code=status.HTTP_201_CREATED)
async def add_search(
    req: SearchHistoryCreate,
    ctx: Session,
    store: SearchHistoryStore = Depends(get_search_history_store),
):
    """Remember a region search. Anonymous searches are not kept."""
    row = await store.add(ctx, req.region_si, req.region_gu)
    return SearchHistoryResponse.model_validate(row) if row else None


@router.get("/address", response_model=AddressResponse)
async def search_address(
    query: str = Query(..., min_length=1),
    search: AddressSearch = Depends(get_address_search),
):
    """Address → coordinates for placing a record on the map."""
    result = await search.search_address(query)
    if result is None:
        raise HTTPException(status_code=404, detail=f"No match for address: {query}")
    return AddressResponse.model_validate(result)
