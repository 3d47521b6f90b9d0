"""FastAPI dependency injection.

`settings.storage_backend` picks the store implementation: "sql" for the
deployed PostgreSQL database, "memory" for local runs without one.
"""

from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from imjang.config import settings
from imjang.data.base import AddressSearch, LoanHistoryStore, MarketPriceStore, RecordStore, SearchHistoryStore
from imjang.data.kakao import KakaoLocalClient
from imjang.data.market_prices import MarketPriceService
from imjang.data.memory_store import (
    MemoryLoanHistoryStore,
    MemoryMarketPriceStore,
    MemoryRecordStore,
    MemorySearchHistoryStore,
)
from imjang.data.molit import MolitClient
from imjang.data.side_channel import BestEffortQueue, side_channel
from imjang.data.sql_store import SqlLoanHistoryStore, SqlMarketPriceStore, SqlRecordStore, SqlSearchHistoryStore


def _use_sql() -> bool:
    return settings.storage_backend == "sql"


@lru_cache
def get_engine() -> AsyncEngine:
    return create_async_engine(settings.database_url, echo=settings.debug)


@lru_cache
def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_engine(), expire_on_commit=False)


@lru_cache
def get_record_store() -> RecordStore:
    return SqlRecordStore(get_sessionmaker()) if _use_sql() else MemoryRecordStore()


@lru_cache
def get_loan_history_store() -> LoanHistoryStore:
    return SqlLoanHistoryStore(get_sessionmaker()) if _use_sql() else MemoryLoanHistoryStore()


@lru_cache
def get_search_history_store() -> SearchHistoryStore:
    return SqlSearchHistoryStore(get_sessionmaker()) if _use_sql() else MemorySearchHistoryStore()


@lru_cache
def get_market_price_store() -> MarketPriceStore:
    return SqlMarketPriceStore(get_sessionmaker()) if _use_sql() else MemoryMarketPriceStore()


def get_market_price_service() -> MarketPriceService:
    return MarketPriceService(get_market_price_store(), MolitClient())


def get_address_search() -> AddressSearch:
    return KakaoLocalClient()


def get_side_channel() -> BestEffortQueue:
    return side_channel
