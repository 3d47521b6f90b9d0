"""Field-survey record routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from imjang.api.deps import get_record_store
from imjang.api.routes.loan import allocation_to_response, range_for_price
from imjang.api.schemas import (
    CommentCreate,
    CommentResponse,
    PhotosAdd,
    RangeAllocationResponse,
    RecordCreate,
    RecordResponse,
    RecordUpdate,
)
from imjang.core.session import AuthenticatedSession
from imjang.data.base import RecordNotFoundError, RecordStore
from imjang.models.record import RecordDraft, RecordFilter, RecordType

router = APIRouter(prefix="/api/v1/records", tags=["records"])

# Fields a PATCH may clear by sending null
_NULLABLE = {
    "region_dong", "address_full", "apartment_name", "latitude", "longitude", "memo", "ai_report",
}


def _not_found(e: RecordNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("", response_model=list[RecordResponse])
async def list_records(
    types: list[RecordType] = Query(default=[], alias="type"),
    area_pyeong: list[int] = Query(default=[]),
    price_min: float | None = None,
    price_max: float | None = None,
    is_ltv_regulated: bool | None = None,
    school_accessibility_min: int | None = Query(default=None, ge=1, le=5),
    store: RecordStore = Depends(get_record_store),
):
    """All records, newest first, optionally filtered."""
    filters = RecordFilter(
        types=types,
        area_pyeong=area_pyeong,
        price_min=price_min,
        price_max=price_max,
        is_ltv_regulated=is_ltv_regulated,
        school_accessibility_min=school_accessibility_min,
    )
    records = await store.list_records(filters)
    return [RecordResponse.model_validate(r) for r in records]


@router.get("/{record_id}", response_model=RecordResponse)
async def get_record(record_id: UUID, store: RecordStore = Depends(get_record_store)):
    try:
        record = await store.get_record(record_id)
    except RecordNotFoundError as e:
        raise _not_found(e)
    return RecordResponse.model_validate(record)


@router.post("", response_model=RecordResponse, status_code=status.HTTP_201_CREATED)
async def create_record(
    req: RecordCreate,
    ctx: AuthenticatedSession,
    store: RecordStore = Depends(get_record_store),
):
    record = await store.create_record(ctx, RecordDraft(**req.model_dump()))
    return RecordResponse.model_validate(record)


@router.patch("/{record_id}", response_model=RecordResponse)
async def update_record(
    record_id: UUID,
    req: RecordUpdate,
    ctx: AuthenticatedSession,
    store: RecordStore = Depends(get_record_store),
):
    updates = {
        k: v for k, v in req.model_dump(exclude_unset=True).items()
        if v is not None or k in _NULLABLE
    }
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")
    try:
        record = await store.update_record(record_id, updates)
    except RecordNotFoundError as e:
        raise _not_found(e)
    return RecordResponse.model_validate(record)


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_record(
    record_id: UUID,
    ctx: AuthenticatedSession,
    store: RecordStore = Depends(get_record_store),
):
    try:
        await store.delete_record(record_id)
    except RecordNotFoundError as e:
        raise _not_found(e)


@router.post("/{record_id}/photos", response_model=RecordResponse)
async def add_photos(
    record_id: UUID,
    req: PhotosAdd,
    ctx: AuthenticatedSession,
    store: RecordStore = Depends(get_record_store),
):
    """Attach photo URLs already uploaded to the storage bucket."""
    try:
        record = await store.add_photos(record_id, req.urls)
    except RecordNotFoundError as e:
        raise _not_found(e)
    return RecordResponse.model_validate(record)


@router.post("/{record_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    record_id: UUID,
    req: CommentCreate,
    ctx: AuthenticatedSession,
    store: RecordStore = Depends(get_record_store),
):
    try:
        comment = await store.add_comment(ctx, record_id, req.content)
    except RecordNotFoundError as e:
        raise _not_found(e)
    return CommentResponse.model_validate(comment)


@router.get("/{record_id}/range", response_model=RangeAllocationResponse)
async def record_range(
    record_id: UUID,
    asset: float | None = Query(default=None, ge=0, allow_inf_nan=False),
    slider_percent: float | None = Query(default=None, ge=0, le=100, allow_inf_nan=False),
    first_time_buyer: bool = False,
    store: RecordStore = Depends(get_record_store),
):
    """Loan split for a record's price. The record's own ltv_rate is left untouched."""
    try:
        record = await store.get_record(record_id)
    except RecordNotFoundError as e:
        raise _not_found(e)
    alloc = range_for_price(record.price_in_hundred_million, asset, slider_percent, first_time_buyer)
    return allocation_to_response(alloc)
