"""Field-survey record data types shared by both storage backends."""

import uuid
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum


class RecordType(Enum):
    LAND = "대지"
    APARTMENT = "아파트"


class RegionSi(Enum):
    SEOUL = "서울"
    GYEONGGI = "경기"


AREA_PYEONG_CHOICES = (20, 30)
LTV_PERCENT_CHOICES = (40, 70)


def resolve_ltv_rate(is_ltv_regulated: bool, ltv_rate: int | None = None) -> int:
    """Unregulated regions are always 70. Regulated ones default to 40."""
    if not is_ltv_regulated:
        return 70
    return ltv_rate if ltv_rate is not None else 40


@dataclass(frozen=True)
class RecordPhoto:
    id: uuid.UUID
    record_id: uuid.UUID
    photo_url: str
    photo_order: int
    created_at: datetime


@dataclass(frozen=True)
class Comment:
    id: uuid.UUID
    record_id: uuid.UUID
    user_id: str
    content: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class RecordDraft:
    """User-editable part of a record."""
    type: RecordType
    area_pyeong: int
    price_in_hundred_million: float
    region_si: RegionSi
    region_gu: str
    school_accessibility: int  # 1-5
    traffic_accessibility: str
    is_ltv_regulated: bool
    ltv_rate: int | None = None  # 40 | 70; derived from is_ltv_regulated when omitted
    region_dong: str | None = None
    address_full: str | None = None
    apartment_name: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    memo: str | None = None
    ai_report: str | None = None

    def resolved_ltv_rate(self) -> int:
        return resolve_ltv_rate(self.is_ltv_regulated, self.ltv_rate)


@dataclass(frozen=True)
class Record:
    id: uuid.UUID
    user_id: str
    type: RecordType
    area_pyeong: int
    price_in_hundred_million: float
    region_si: RegionSi
    region_gu: str
    school_accessibility: int
    traffic_accessibility: str
    is_ltv_regulated: bool
    ltv_rate: int
    created_at: datetime
    updated_at: datetime
    region_dong: str | None = None
    address_full: str | None = None
    apartment_name: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    memo: str | None = None
    ai_report: str | None = None
    photos: list[RecordPhoto] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)


@dataclass(frozen=True)
class RecordFilter:
    types: list[RecordType] = field(default_factory=list)
    area_pyeong: list[int] = field(default_factory=list)
    price_min: float | None = None
    price_max: float | None = None
    is_ltv_regulated: bool | None = None
    school_accessibility_min: int | None = None

    def matches(self, record: Record) -> bool:
        if self.types and record.type not in self.types:
            return False
        if self.area_pyeong and record.area_pyeong not in self.area_pyeong:
            return False
        if self.price_min is not None and record.price_in_hundred_million < self.price_min:
            return False
        if self.price_max is not None and record.price_in_hundred_million > self.price_max:
            return False
        if self.is_ltv_regulated is not None and record.is_ltv_regulated != self.is_ltv_regulated:
            return False
        if self.school_accessibility_min is not None and record.school_accessibility < self.school_accessibility_min:
            return False
        return True


@dataclass(frozen=True)
class SearchHistory:
    id: uuid.UUID
    user_id: str
    region_si: str
    region_gu: str
    searched_at: datetime


@dataclass(frozen=True)
class LoanCalculation:
    id: uuid.UUID
    user_id: str
    current_asset: float
    apartment_price: float
    ltv_rate: int
    max_loan_amount: float
    calculated_at: datetime


@dataclass(frozen=True)
class MarketPrice:
    region_si: str
    region_gu: str
    apartment_name: str
    transaction_date: str  # "YYYY.MM.DD"
    price_in_hundred_million: float
    area_pyeong: int
    floor: int
    fetched_at: datetime
    id: uuid.UUID | None = None


@dataclass(frozen=True)
class AddressResult:
    address_name: str
    latitude: float
    longitude: float


EDITABLE_FIELDS = frozenset(f.name for f in fields(RecordDraft))


def check_editable(updates: dict) -> None:
    unknown = set(updates) - EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")


def reconcile_ltv_updates(is_ltv_regulated: bool, updates: dict) -> dict:
    """Keep ltv_rate consistent with the regulated flag after a partial update.

    A flag change without an explicit rate falls back to that regime's default.
    """
    flag_changed = updates.get("is_ltv_regulated", is_ltv_regulated) != is_ltv_regulated
    if "ltv_rate" not in updates and not flag_changed:
        return updates
    regulated = updates.get("is_ltv_regulated", is_ltv_regulated)
    return {**updates, "ltv_rate": resolve_ltv_rate(regulated, updates.get("ltv_rate"))}
