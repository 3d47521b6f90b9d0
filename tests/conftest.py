"""Shared fixtures.

Canonical scenario: 15.5억 apartment, 3.5억 in hand, unregulated 70% LTV,
4% for 30 years.
"""

import random
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from imjang.api.app import app
from imjang.api.deps import (
    get_loan_history_store,
    get_market_price_service,
    get_market_price_store,
    get_record_store,
    get_search_history_store,
    get_side_channel,
)
from imjang.config import settings
from imjang.core.session import TOKEN_AUDIENCE, SessionContext
from imjang.data.market_prices import MarketPriceService
from imjang.data.memory_store import (
    MemoryLoanHistoryStore,
    MemoryMarketPriceStore,
    MemoryRecordStore,
    MemorySearchHistoryStore,
)
from imjang.data.side_channel import BestEffortQueue
from imjang.models.db import Base
from imjang.models.record import RecordDraft, RecordType, RegionSi


@pytest.fixture
def user_ctx() -> SessionContext:
    return SessionContext(user_id="user-1", email="family@example.com")


@pytest.fixture
def other_user_ctx() -> SessionContext:
    return SessionContext(user_id="user-2")


@pytest.fixture
def anonymous_ctx() -> SessionContext:
    return SessionContext()


@pytest.fixture
def apartment_draft() -> RecordDraft:
    """Regulated 30평 apartment in 강남구."""
    return RecordDraft(
        type=RecordType.APARTMENT,
        area_pyeong=30,
        price_in_hundred_million=15.5,
        region_si=RegionSi.SEOUL,
        region_gu="강남구",
        region_dong="대치동",
        apartment_name="래미안 대치팰리스",
        school_accessibility=5,
        traffic_accessibility="도보 5분 지하철역",
        is_ltv_regulated=True,
    )


@pytest.fixture
def land_draft() -> RecordDraft:
    """Unregulated 20평 plot in 경기 용인시."""
    return RecordDraft(
        type=RecordType.LAND,
        area_pyeong=20,
        price_in_hundred_million=6.0,
        region_si=RegionSi.GYEONGGI,
        region_gu="용인시",
        school_accessibility=2,
        traffic_accessibility="버스 15분",
        is_ltv_regulated=False,
    )


@pytest.fixture
def record_store() -> MemoryRecordStore:
    return MemoryRecordStore()


@pytest.fixture
def loan_history_store() -> MemoryLoanHistoryStore:
    return MemoryLoanHistoryStore()


@pytest.fixture
def search_history_store() -> MemorySearchHistoryStore:
    return MemorySearchHistoryStore()


@pytest.fixture
def market_price_store() -> MemoryMarketPriceStore:
    return MemoryMarketPriceStore()


@pytest.fixture
async def sqlite_sessionmaker():
    """In-memory SQLite database with all tables created."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


# ── API ──────────────────────────────────────────────────────────

JWT_SECRET = "imjang-test-signing-secret-0123456789"


def make_token(user_id: str, secret: str = JWT_SECRET, expires_in: int = 3600, **claims) -> str:
    payload = {
        "sub": user_id,
        "aud": TOKEN_AUDIENCE,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        **claims,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token('user-1', email='family@example.com')}"}


@pytest.fixture
def side_queue() -> BestEffortQueue:
    return BestEffortQueue()


@pytest.fixture
def api_client(monkeypatch, record_store, loan_history_store, search_history_store, market_price_store, side_queue):
    """TestClient over in-memory stores with real token checking."""
    monkeypatch.setattr(settings, "storage_backend", "memory")
    monkeypatch.setattr(settings, "auth_disabled", False)
    monkeypatch.setattr(settings, "auth_jwt_secret", JWT_SECRET)

    app.dependency_overrides[get_record_store] = lambda: record_store
    app.dependency_overrides[get_loan_history_store] = lambda: loan_history_store
    app.dependency_overrides[get_search_history_store] = lambda: search_history_store
    app.dependency_overrides[get_market_price_store] = lambda: market_price_store
    app.dependency_overrides[get_market_price_service] = lambda: MarketPriceService(
        market_price_store, rng=random.Random(0)
    )
    app.dependency_overrides[get_side_channel] = lambda: side_queue
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def token_for():
    """Build a signed access token: token_for("user-2", expires_in=-10)."""
    return make_token


@pytest.fixture
def jwt_secret() -> str:
    return JWT_SECRET
