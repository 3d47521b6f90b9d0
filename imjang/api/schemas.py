"""Pydantic schemas for API request/response models."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from imjang.models.record import RecordType, RegionSi


# ---- Request schemas ----

class LoanCalculateRequest(BaseModel):
    """Raw form values; amounts are 억원 and may arrive as free text."""
    asset: str | float | None = Field(None, description="Current asset, e.g. '3.5'")
    price: str | float | None = Field(None, description="Apartment price, e.g. '15.5'")
    ltv_rate: Literal[40, 70] = 70


class RangeRequest(BaseModel):
    price: float = Field(..., gt=0, allow_inf_nan=False)
    asset: float | None = Field(None, ge=0, allow_inf_nan=False)
    slider_percent: float | None = Field(None, ge=0, le=100, allow_inf_nan=False, description="Takes precedence over asset")
    is_first_time_buyer: bool = False


class RecordCreate(BaseModel):
    type: RecordType
    area_pyeong: Literal[20, 30]
    price_in_hundred_million: float = Field(..., gt=0, allow_inf_nan=False)
    region_si: RegionSi
    region_gu: str = Field(..., min_length=1)
    region_dong: str | None = None
    address_full: str | None = None
    apartment_name: str | None = None
    latitude: float | None = Field(None, allow_inf_nan=False)
    longitude: float | None = Field(None, allow_inf_nan=False)
    school_accessibility: int = Field(..., ge=1, le=5)
    traffic_accessibility: str = ""
    is_ltv_regulated: bool = False
    ltv_rate: Literal[40, 70] | None = None
    memo: str | None = None
    ai_report: str | None = None


class RecordUpdate(BaseModel):
    type: RecordType | None = None
    area_pyeong: Literal[20, 30] | None = None
    price_in_hundred_million: float | None = Field(None, gt=0, allow_inf_nan=False)
    region_si: RegionSi | None = None
    region_gu: str | None = Field(None, min_length=1)
    region_dong: str | None = None
    address_full: str | None = None
    apartment_name: str | None = None
    latitude: float | None = Field(None, allow_inf_nan=False)
    longitude: float | None = Field(None, allow_inf_nan=False)
    school_accessibility: int | None = Field(None, ge=1, le=5)
    traffic_accessibility: str | None = None
    is_ltv_regulated: bool | None = None
    ltv_rate: Literal[40, 70] | None = None
    memo: str | None = None
    ai_report: str | None = None


class PhotosAdd(BaseModel):
    urls: list[str] = Field(..., min_length=1)


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1)


class SearchHistoryCreate(BaseModel):
    region_si: str = Field(..., min_length=1)
    region_gu: str = Field(..., min_length=1)


# ---- Response schemas ----

class LoanResultResponse(BaseModel):
    max_loan_amount: float
    down_payment: float
    additional_fund_needed: float
    monthly_payment: float
    is_affordable: bool
    ltv_rate: int
    annual_rate: float
    term_years: int


class RangeAllocationResponse(BaseModel):
    price: float
    ltv_percent: int
    max_loan_amount: float
    actual_asset: float
    actual_loan_amount: float
    asset_ratio: float
    loan_ratio: float
    monthly_payment: float
    total_interest: float
    annual_rate: float
    term_years: int


class LoanCalculationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    current_asset: float
    apartment_price: float
    ltv_rate: int
    max_loan_amount: float
    calculated_at: datetime


class PhotoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    photo_url: str
    photo_order: int
    created_at: datetime


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    record_id: UUID
    user_id: str
    content: str
    created_at: datetime
    updated_at: datetime


class RecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    type: RecordType
    area_pyeong: int
    price_in_hundred_million: float
    region_si: RegionSi
    region_gu: str
    region_dong: str | None = None
    address_full: str | None = None
    apartment_name: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    school_accessibility: int
    traffic_accessibility: str
    is_ltv_regulated: bool
    ltv_rate: int
    memo: str | None = None
    ai_report: str | None = None
    created_at: datetime
    updated_at: datetime
    photos: list[PhotoResponse] = []
    comments: list[CommentResponse] = []


class MarketPriceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    region_si: str
    region_gu: str
    apartment_name: str
    transaction_date: str
    price_in_hundred_million: float
    area_pyeong: int
    floor: int
    fetched_at: datetime


class SearchHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    region_si: str
    region_gu: str
    searched_at: datetime


class AddressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    address_name: str
    latitude: float
    longitude: float


class ErrorResponse(BaseModel):
    """RFC 7807 Problem Details body."""
    type: str = "about:blank"
    title: str
    status: int
    detail: str = ""
    request_id: str = ""
