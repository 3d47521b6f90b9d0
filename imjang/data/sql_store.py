"""SQLAlchemy-backed store implementations.

Every operation opens its own AsyncSession from the shared sessionmaker, so a
store can be used from request handlers and background tasks alike.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from imjang.core.session import SessionContext
from imjang.data.base import RecordNotFoundError
from imjang.models.db import (
    CommentRow,
    LoanCalculationRow,
    MarketPriceRow,
    RecordPhotoRow,
    RecordRow,
    SearchHistoryRow,
)
from imjang.models.loan import LoanSnapshot
from imjang.models.record import (
    Comment,
    LoanCalculation,
    MarketPrice,
    Record,
    RecordDraft,
    RecordFilter,
    RecordPhoto,
    RecordType,
    RegionSi,
    SearchHistory,
    check_editable,
    reconcile_ltv_updates,
)

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _photo(row: RecordPhotoRow) -> RecordPhoto:
    return RecordPhoto(
        id=row.id,
        record_id=row.record_id,
        photo_url=row.photo_url,
        photo_order=row.photo_order,
        created_at=row.created_at,
    )


def _comment(row: CommentRow) -> Comment:
    return Comment(
        id=row.id,
        record_id=row.record_id,
        user_id=row.user_id,
        content=row.content,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _record(row: RecordRow, with_comments: bool) -> Record:
    return Record(
        id=row.id,
        user_id=row.user_id,
        type=RecordType(row.type),
        area_pyeong=row.area_pyeong,
        price_in_hundred_million=row.price_in_hundred_million,
        region_si=RegionSi(row.region_si),
        region_gu=row.region_gu,
        region_dong=row.region_dong,
        address_full=row.address_full,
        apartment_name=row.apartment_name,
        latitude=row.latitude,
        longitude=row.longitude,
        school_accessibility=row.school_accessibility,
        traffic_accessibility=row.traffic_accessibility,
        is_ltv_regulated=row.is_ltv_regulated,
        ltv_rate=row.ltv_rate,
        memo=row.memo,
        ai_report=row.ai_report,
        created_at=row.created_at,
        updated_at=row.updated_at,
        photos=[_photo(p) for p in row.photos],
        comments=[_comment(c) for c in row.comments] if with_comments else [],
    )


def _column_value(value: Any) -> Any:
    return value.value if isinstance(value, (RecordType, RegionSi)) else value


class SqlRecordStore:
    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]):
        self.sessionmaker = sessionmaker

    async def _load(self, session: AsyncSession, record_id: uuid.UUID) -> RecordRow:
        stmt = (
            select(RecordRow)
            .where(RecordRow.id == record_id)
            .options(selectinload(RecordRow.photos), selectinload(RecordRow.comments))
        )
        row = (await session.execute(stmt)).scalar_one_or_none()
        if row is None:
            raise RecordNotFoundError(record_id)
        return row

    async def list_records(self, filters: RecordFilter | None = None) -> list[Record]:
        stmt = select(RecordRow).options(selectinload(RecordRow.photos))
        if filters is not None:
            if filters.types:
                stmt = stmt.where(RecordRow.type.in_([t.value for t in filters.types]))
            if filters.area_pyeong:
                stmt = stmt.where(RecordRow.area_pyeong.in_(filters.area_pyeong))
            if filters.price_min is not None:
                stmt = stmt.where(RecordRow.price_in_hundred_million >= filters.price_min)
            if filters.price_max is not None:
                stmt = stmt.where(RecordRow.price_in_hundred_million <= filters.price_max)
            if filters.is_ltv_regulated is not None:
                stmt = stmt.where(RecordRow.is_ltv_regulated == filters.is_ltv_regulated)
            if filters.school_accessibility_min is not None:
                stmt = stmt.where(RecordRow.school_accessibility >= filters.school_accessibility_min)
        stmt = stmt.order_by(RecordRow.created_at.desc())

        async with self.sessionmaker() as session:
            rows = (await session.execute(stmt)).scalars().all()
            return [_record(r, with_comments=False) for r in rows]

    async def get_record(self, record_id: uuid.UUID) -> Record:
        async with self.sessionmaker() as session:
            return _record(await self._load(session, record_id), with_comments=True)

    async def create_record(self, ctx: SessionContext, draft: RecordDraft) -> Record:
        user_id = ctx.require_user_id()
        now = _now()
        values = {k: _column_value(v) for k, v in vars(draft).items()}
        values["ltv_rate"] = draft.resolved_ltv_rate()
        async with self.sessionmaker() as session:
            row = RecordRow(user_id=user_id, created_at=now, updated_at=now, photos=[], comments=[], **values)
            session.add(row)
            await session.commit()
            logger.info("Created record %s for user %s", row.id, user_id)
            return _record(row, with_comments=False)

    async def update_record(self, record_id: uuid.UUID, updates: dict[str, Any]) -> Record:
        check_editable(updates)
        async with self.sessionmaker() as session:
            row = await self._load(session, record_id)
            updates = reconcile_ltv_updates(row.is_ltv_regulated, updates)
            for key, value in updates.items():
                setattr(row, key, _column_value(value))
            row.updated_at = _now()
            await session.commit()
            return _record(row, with_comments=False)

    async def delete_record(self, record_id: uuid.UUID) -> None:
        async with self.sessionmaker() as session:
            row = await self._load(session, record_id)
            await session.delete(row)
            await session.commit()

    async def add_photos(self, record_id: uuid.UUID, urls: list[str]) -> Record:
        async with self.sessionmaker() as session:
            row = await self._load(session, record_id)
            last = await session.scalar(
                select(func.max(RecordPhotoRow.photo_order)).where(RecordPhotoRow.record_id == record_id)
            )
            start = -1 if last is None else last
            for offset, url in enumerate(urls, start=1):
                row.photos.append(RecordPhotoRow(photo_url=url, photo_order=start + offset, created_at=_now()))
            await session.commit()
            return _record(row, with_comments=False)

    async def add_comment(self, ctx: SessionContext, record_id: uuid.UUID, content: str) -> Comment:
        user_id = ctx.require_user_id()
        async with self.sessionmaker() as session:
            await self._load(session, record_id)
            now = _now()
            row = CommentRow(record_id=record_id, user_id=user_id, content=content, created_at=now, updated_at=now)
            session.add(row)
            await session.commit()
            return _comment(row)


class SqlLoanHistoryStore:
    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]):
        self.sessionmaker = sessionmaker

    async def save(self, ctx: SessionContext, snapshot: LoanSnapshot) -> LoanCalculation | None:
        if not ctx.is_authenticated:
            return None
        async with self.sessionmaker() as session:
            row = LoanCalculationRow(
                user_id=ctx.user_id,
                current_asset=snapshot.current_asset,
                apartment_price=snapshot.apartment_price,
                ltv_rate=snapshot.ltv_rate,
                max_loan_amount=snapshot.max_loan_amount,
                calculated_at=_now(),
            )
            session.add(row)
            await session.commit()
            return LoanCalculation(
                id=row.id,
                user_id=row.user_id,
                current_asset=row.current_asset,
                apartment_price=row.apartment_price,
                ltv_rate=row.ltv_rate,
                max_loan_amount=row.max_loan_amount,
                calculated_at=row.calculated_at,
            )

    async def recent(self, ctx: SessionContext, limit: int = 10) -> list[LoanCalculation]:
        if not ctx.is_authenticated:
            return []
        stmt = (
            select(LoanCalculationRow)
            .where(LoanCalculationRow.user_id == ctx.user_id)
            .order_by(LoanCalculationRow.calculated_at.desc())
            .limit(limit)
        )
        async with self.sessionmaker() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [
            LoanCalculation(
                id=r.id,
                user_id=r.user_id,
                current_asset=r.current_asset,
                apartment_price=r.apartment_price,
                ltv_rate=r.ltv_rate,
                max_loan_amount=r.max_loan_amount,
                calculated_at=r.calculated_at,
            )
            for r in rows
        ]


class SqlSearchHistoryStore:
    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]):
        self.sessionmaker = sessionmaker

    async def add(self, ctx: SessionContext, region_si: str, region_gu: str) -> SearchHistory | None:
        if not ctx.is_authenticated:
            return None
        async with self.sessionmaker() as session:
            row = SearchHistoryRow(user_id=ctx.user_id, region_si=region_si, region_gu=region_gu, searched_at=_now())
            session.add(row)
            await session.commit()
            return SearchHistory(
                id=row.id,
                user_id=row.user_id,
                region_si=row.region_si,
                region_gu=row.region_gu,
                searched_at=row.searched_at,
            )

    async def recent(self, ctx: SessionContext, limit: int = 10) -> list[SearchHistory]:
        if not ctx.is_authenticated:
            return []
        stmt = (
            select(SearchHistoryRow)
            .where(SearchHistoryRow.user_id == ctx.user_id)
            .order_by(SearchHistoryRow.searched_at.desc())
            .limit(limit)
        )
        async with self.sessionmaker() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [
            SearchHistory(
                id=r.id,
                user_id=r.user_id,
                region_si=r.region_si,
                region_gu=r.region_gu,
                searched_at=r.searched_at,
            )
            for r in rows
        ]


class SqlMarketPriceStore:
    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]):
        self.sessionmaker = sessionmaker

    async def find(self, region_gu: str, year_month: str) -> list[MarketPrice]:
        prefix = f"{year_month[:4]}.{year_month[4:]}"
        stmt = (
            select(MarketPriceRow)
            .where(MarketPriceRow.region_gu == region_gu)
            .where(MarketPriceRow.transaction_date.like(f"{prefix}%"))
            .order_by(MarketPriceRow.transaction_date.desc())
        )
        async with self.sessionmaker() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [
            MarketPrice(
                id=r.id,
                region_si=r.region_si,
                region_gu=r.region_gu,
                apartment_name=r.apartment_name,
                transaction_date=r.transaction_date,
                price_in_hundred_million=r.price_in_hundred_million,
                area_pyeong=r.area_pyeong,
                floor=r.floor,
                fetched_at=r.fetched_at,
            )
            for r in rows
        ]

    async def save_many(self, prices: list[MarketPrice]) -> None:
        async with self.sessionmaker() as session:
            session.add_all([
                MarketPriceRow(
                    region_si=p.region_si,
                    region_gu=p.region_gu,
                    apartment_name=p.apartment_name,
                    transaction_date=p.transaction_date,
                    price_in_hundred_million=p.price_in_hundred_million,
                    area_pyeong=p.area_pyeong,
                    floor=p.floor,
                    fetched_at=p.fetched_at,
                )
                for p in prices
            ])
            await session.commit()
