"""Protocol definitions for data access.

Each store has two backings: SQLAlchemy (`sql_store`) for deployed runs and an
in-process one (`memory_store`) for local runs and tests.
"""

import uuid
from typing import Any, Protocol, runtime_checkable

from imjang.core.session import SessionContext
from imjang.models.loan import LoanSnapshot
from imjang.models.record import (
    AddressResult,
    Comment,
    LoanCalculation,
    MarketPrice,
    Record,
    RecordDraft,
    RecordFilter,
    SearchHistory,
)


class RecordNotFoundError(LookupError):
    def __init__(self, record_id: uuid.UUID):
        super().__init__(f"Record not found: {record_id}")
        self.record_id = record_id


class MarketDataUnavailableError(RuntimeError):
    pass


@runtime_checkable
class RecordStore(Protocol):
    async def list_records(self, filters: RecordFilter | None = None) -> list[Record]:
        """All records newest first, with photos."""
        ...

    async def get_record(self, record_id: uuid.UUID) -> Record:
        """One record with photos and comments. Raises RecordNotFoundError."""
        ...

    async def create_record(self, ctx: SessionContext, draft: RecordDraft) -> Record:
        """Insert a record owned by the session user."""
        ...

    async def update_record(self, record_id: uuid.UUID, updates: dict[str, Any]) -> Record:
        """Apply a partial update."""
        ...

    async def delete_record(self, record_id: uuid.UUID) -> None:
        ...

    async def add_photos(self, record_id: uuid.UUID, urls: list[str]) -> Record:
        """Attach already-uploaded photo URLs after the existing ones."""
        ...

    async def add_comment(self, ctx: SessionContext, record_id: uuid.UUID, content: str) -> Comment:
        ...


@runtime_checkable
class LoanHistoryStore(Protocol):
    async def save(self, ctx: SessionContext, snapshot: LoanSnapshot) -> LoanCalculation | None:
        """Append a calculation. Anonymous sessions are not recorded."""
        ...

    async def recent(self, ctx: SessionContext, limit: int = 10) -> list[LoanCalculation]:
        ...


@runtime_checkable
class SearchHistoryStore(Protocol):
    async def add(self, ctx: SessionContext, region_si: str, region_gu: str) -> SearchHistory | None:
        ...

    async def recent(self, ctx: SessionContext, limit: int = 10) -> list[SearchHistory]:
        ...


@runtime_checkable
class MarketPriceStore(Protocol):
    async def find(self, region_gu: str, year_month: str) -> list[MarketPrice]:
        """Stored trades for a district and YYYYMM, newest first."""
        ...

    async def save_many(self, prices: list[MarketPrice]) -> None:
        ...


@runtime_checkable
class MarketPriceSource(Protocol):
    async def fetch_trades(self, region_code: str, year_month: str) -> list[MarketPrice]:
        """Fetch trades from an external provider. Raises MarketDataUnavailableError."""
        ...


@runtime_checkable
class AddressSearch(Protocol):
    async def search_address(self, query: str) -> AddressResult | None:
        """Resolve a free-text address to coordinates."""
        ...
