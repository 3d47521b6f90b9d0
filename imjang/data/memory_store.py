"""In-process store implementations for local runs and tests.

State lives in plain dicts/lists on the instance; nothing survives a restart.
"""

import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from imjang.core.session import SessionContext
from imjang.data.base import RecordNotFoundError
from imjang.models.loan import LoanSnapshot
from imjang.models.record import (
    Comment,
    LoanCalculation,
    MarketPrice,
    Record,
    RecordDraft,
    RecordFilter,
    RecordPhoto,
    SearchHistory,
    check_editable,
    reconcile_ltv_updates,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryRecordStore:
    def __init__(self):
        self._records: dict[uuid.UUID, Record] = {}
        self._photos: dict[uuid.UUID, list[RecordPhoto]] = {}
        self._comments: dict[uuid.UUID, list[Comment]] = {}

    def _assemble(self, record: Record, with_comments: bool) -> Record:
        photos = sorted(self._photos.get(record.id, []), key=lambda p: p.photo_order)
        comments = list(self._comments.get(record.id, [])) if with_comments else []
        return replace(record, photos=photos, comments=comments)

    def _require(self, record_id: uuid.UUID) -> Record:
        record = self._records.get(record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        return record

    async def list_records(self, filters: RecordFilter | None = None) -> list[Record]:
        records = sorted(reversed(list(self._records.values())), key=lambda r: r.created_at, reverse=True)
        if filters is not None:
            records = [r for r in records if filters.matches(r)]
        return [self._assemble(r, with_comments=False) for r in records]

    async def get_record(self, record_id: uuid.UUID) -> Record:
        return self._assemble(self._require(record_id), with_comments=True)

    async def create_record(self, ctx: SessionContext, draft: RecordDraft) -> Record:
        user_id = ctx.require_user_id()
        now = _now()
        values = {k: v for k, v in vars(draft).items() if k != "ltv_rate"}
        record = Record(
            id=uuid.uuid4(),
            user_id=user_id,
            ltv_rate=draft.resolved_ltv_rate(),
            created_at=now,
            updated_at=now,
            **values,
        )
        self._records[record.id] = record
        return self._assemble(record, with_comments=False)

    async def update_record(self, record_id: uuid.UUID, updates: dict[str, Any]) -> Record:
        check_editable(updates)
        current = self._require(record_id)
        updates = reconcile_ltv_updates(current.is_ltv_regulated, updates)
        record = replace(current, **updates, updated_at=_now())
        self._records[record_id] = record
        return self._assemble(record, with_comments=False)

    async def delete_record(self, record_id: uuid.UUID) -> None:
        self._require(record_id)
        del self._records[record_id]
        self._photos.pop(record_id, None)
        self._comments.pop(record_id, None)

    async def add_photos(self, record_id: uuid.UUID, urls: list[str]) -> Record:
        record = self._require(record_id)
        photos = self._photos.setdefault(record_id, [])
        start = max((p.photo_order for p in photos), default=-1) + 1
        for offset, url in enumerate(urls):
            photos.append(RecordPhoto(
                id=uuid.uuid4(),
                record_id=record_id,
                photo_url=url,
                photo_order=start + offset,
                created_at=_now(),
            ))
        return self._assemble(record, with_comments=False)

    async def add_comment(self, ctx: SessionContext, record_id: uuid.UUID, content: str) -> Comment:
        user_id = ctx.require_user_id()
        self._require(record_id)
        now = _now()
        comment = Comment(
            id=uuid.uuid4(),
            record_id=record_id,
            user_id=user_id,
            content=content,
            created_at=now,
            updated_at=now,
        )
        self._comments.setdefault(record_id, []).append(comment)
        return comment


class MemoryLoanHistoryStore:
    def __init__(self):
        self._rows: list[LoanCalculation] = []

    async def save(self, ctx: SessionContext, snapshot: LoanSnapshot) -> LoanCalculation | None:
        if not ctx.is_authenticated:
            return None
        row = LoanCalculation(
            id=uuid.uuid4(),
            user_id=ctx.user_id,
            current_asset=snapshot.current_asset,
            apartment_price=snapshot.apartment_price,
            ltv_rate=snapshot.ltv_rate,
            max_loan_amount=snapshot.max_loan_amount,
            calculated_at=_now(),
        )
        self._rows.append(row)
        return row

    async def recent(self, ctx: SessionContext, limit: int = 10) -> list[LoanCalculation]:
        if not ctx.is_authenticated:
            return []
        # Insertion order breaks ties between identical timestamps.
        mine = [r for r in reversed(self._rows) if r.user_id == ctx.user_id]
        return mine[:limit]


class MemorySearchHistoryStore:
    def __init__(self):
        self._rows: list[SearchHistory] = []

    async def add(self, ctx: SessionContext, region_si: str, region_gu: str) -> SearchHistory | None:
        if not ctx.is_authenticated:
            return None
        row = SearchHistory(
            id=uuid.uuid4(),
            user_id=ctx.user_id,
            region_si=region_si,
            region_gu=region_gu,
            searched_at=_now(),
        )
        self._rows.append(row)
        return row

    async def recent(self, ctx: SessionContext, limit: int = 10) -> list[SearchHistory]:
        if not ctx.is_authenticated:
            return []
        mine = [r for r in reversed(self._rows) if r.user_id == ctx.user_id]
        return mine[:limit]


class MemoryMarketPriceStore:
    def __init__(self):
        self._rows: list[MarketPrice] = []

    async def find(self, region_gu: str, year_month: str) -> list[MarketPrice]:
        prefix = f"{year_month[:4]}.{year_month[4:]}"
        rows = [
            r for r in self._rows
            if r.region_gu == region_gu and r.transaction_date.startswith(prefix)
        ]
        return sorted(rows, key=lambda r: r.transaction_date, reverse=True)

    async def save_many(self, prices: list[MarketPrice]) -> None:
        self._rows.extend(replace(p, id=p.id or uuid.uuid4()) for p in prices)
