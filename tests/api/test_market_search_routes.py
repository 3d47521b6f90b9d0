"""Tests for the market price, search history and address endpoints."""

from unittest.mock import AsyncMock

import pytest

from imjang.api.app import app
from imjang.api.deps import get_address_search
from imjang.models.record import AddressResult


@pytest.fixture
def address_search():
    search = AsyncMock()
    app.dependency_overrides[get_address_search] = lambda: search
    return search


class TestMarketPrices:
    def test_prices(self, api_client):
        resp = api_client.get("/api/v1/market/prices", params={"regionCode": "11680", "yearMonth": "202403"})
        assert resp.status_code == 200
        rows = resp.json()
        assert 5 <= len(rows) <= 14
        assert all(r["transaction_date"].startswith("2024.03.") for r in rows)
        dates = [r["transaction_date"] for r in rows]
        assert dates == sorted(dates, reverse=True)

    def test_repeat_request_served_from_store(self, api_client, market_price_store):
        params = {"regionCode": "11680", "yearMonth": "202403"}
        first = api_client.get("/api/v1/market/prices", params=params).json()
        second = api_client.get("/api/v1/market/prices", params=params).json()
        assert len(second) == len(first)
        assert len(market_price_store._rows) == len(first)
        assert sorted(r["apartment_name"] for r in second) == sorted(r["apartment_name"] for r in first)

    @pytest.mark.parametrize("year_month", ["2024-03", "202413", "abc"])
    def test_bad_year_month(self, api_client, year_month):
        resp = api_client.get("/api/v1/market/prices", params={"regionCode": "11680", "yearMonth": year_month})
        assert resp.status_code == 400

    def test_missing_params(self, api_client):
        assert api_client.get("/api/v1/market/prices").status_code == 422


class TestSearchHistory:
    def test_add_and_list(self, api_client, auth_headers):
        resp = api_client.post(
            "/api/v1/search/history", json={"region_si": "서울", "region_gu": "강남구"}, headers=auth_headers
        )
        assert resp.status_code == 201
        assert resp.json()["region_gu"] == "강남구"
        api_client.post("/api/v1/search/history", json={"region_si": "경기", "region_gu": "분당구"}, headers=auth_headers)

        rows = api_client.get("/api/v1/search/history", headers=auth_headers).json()
        assert [r["region_gu"] for r in rows] == ["분당구", "강남구"]

    def test_anonymous_not_kept(self, api_client):
        resp = api_client.post("/api/v1/search/history", json={"region_si": "서울", "region_gu": "강남구"})
        assert resp.status_code == 201
        assert resp.json() is None
        assert api_client.get("/api/v1/search/history").json() == []

    def test_history_limit(self, api_client, auth_headers):
        for i in range(12):
            api_client.post(
                "/api/v1/search/history", json={"region_si": "서울", "region_gu": f"구{i}"}, headers=auth_headers
            )
        rows = api_client.get("/api/v1/search/history", headers=auth_headers).json()
        assert len(rows) == 10
        assert rows[0]["region_gu"] == "구11"


class TestAddressSearch:
    def test_found(self, api_client, address_search):
        address_search.search_address = AsyncMock(
            return_value=AddressResult(address_name="서울 강남구 대치동 316", latitude=37.4994, longitude=127.0627)
        )
        resp = api_client.get("/api/v1/search/address", params={"query": "대치동 316"})
        assert resp.status_code == 200
        assert resp.json() == {"address_name": "서울 강남구 대치동 316", "latitude": 37.4994, "longitude": 127.0627}
        address_search.search_address.assert_awaited_once_with("대치동 316")

    def test_no_match(self, api_client, address_search):
        address_search.search_address = AsyncMock(return_value=None)
        resp = api_client.get("/api/v1/search/address", params={"query": "없는 주소"})
        assert resp.status_code == 404

    def test_empty_query(self, api_client, address_search):
        assert api_client.get("/api/v1/search/address", params={"query": ""}).status_code == 422
