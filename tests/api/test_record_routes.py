"""Tests for the field-survey record endpoints."""

import json
import uuid

import pytest

APARTMENT = {
    "type": "아파트",
    "area_pyeong": 30,
    "price_in_hundred_million": 15.5,
    "region_si": "서울",
    "region_gu": "강남구",
    "region_dong": "대치동",
    "apartment_name": "래미안 대치팰리스",
    "school_accessibility": 5,
    "traffic_accessibility": "도보 5분",
    "is_ltv_regulated": True,
}

LAND = {
    "type": "대지",
    "area_pyeong": 20,
    "price_in_hundred_million": 6.0,
    "region_si": "경기",
    "region_gu": "용인시",
    "school_accessibility": 2,
    "is_ltv_regulated": False,
}


@pytest.fixture
def created(api_client, auth_headers):
    resp = api_client.post("/api/v1/records", json=APARTMENT, headers=auth_headers)
    assert resp.status_code == 201
    return resp.json()


class TestCreate:
    def test_create(self, created):
        assert created["user_id"] == "user-1"
        assert created["ltv_rate"] == 40
        assert created["type"] == "아파트"
        assert created["photos"] == []

    def test_requires_sign_in(self, api_client):
        resp = api_client.post("/api/v1/records", json=APARTMENT)
        assert resp.status_code == 401
        assert resp.headers["WWW-Authenticate"] == "Bearer"

    def test_unregulated_defaults_to_70(self, api_client, auth_headers):
        resp = api_client.post("/api/v1/records", json=LAND, headers=auth_headers)
        assert resp.json()["ltv_rate"] == 70

    def test_unregulated_ignores_explicit_rate(self, api_client, auth_headers):
        resp = api_client.post("/api/v1/records", json={**LAND, "ltv_rate": 40}, headers=auth_headers)
        assert resp.status_code == 201
        assert resp.json()["ltv_rate"] == 70

    def test_rejects_non_finite_price(self, api_client, auth_headers):
        body = json.dumps(APARTMENT, ensure_ascii=False).replace("15.5", "1e400")
        resp = api_client.post(
            "/api/v1/records", content=body.encode(), headers={**auth_headers, "Content-Type": "application/json"}
        )
        assert resp.status_code == 422

    @pytest.mark.parametrize(
        "override",
        [
            {"area_pyeong": 25},
            {"school_accessibility": 6},
            {"price_in_hundred_million": 0},
            {"type": "빌라"},
            {"region_si": "부산"},
            {"ltv_rate": 50},
        ],
    )
    def test_rejects_invalid_fields(self, api_client, auth_headers, override):
        resp = api_client.post("/api/v1/records", json={**APARTMENT, **override}, headers=auth_headers)
        assert resp.status_code == 422


class TestList:
    def test_newest_first(self, api_client, auth_headers):
        first = api_client.post("/api/v1/records", json=APARTMENT, headers=auth_headers).json()
        second = api_client.post("/api/v1/records", json=LAND, headers=auth_headers).json()
        ids = [r["id"] for r in api_client.get("/api/v1/records").json()]
        assert ids == [second["id"], first["id"]]

    def test_filters(self, api_client, auth_headers):
        apt = api_client.post("/api/v1/records", json=APARTMENT, headers=auth_headers).json()
        land = api_client.post("/api/v1/records", json=LAND, headers=auth_headers).json()

        def ids(params):
            return [r["id"] for r in api_client.get("/api/v1/records", params=params).json()]

        assert ids({"type": "대지"}) == [land["id"]]
        assert ids({"type": ["대지", "아파트"]}) == [land["id"], apt["id"]]
        assert ids({"area_pyeong": 30}) == [apt["id"]]
        assert ids({"price_min": 10}) == [apt["id"]]
        assert ids({"price_max": 10}) == [land["id"]]
        assert ids({"is_ltv_regulated": "false"}) == [land["id"]]
        assert ids({"school_accessibility_min": 3}) == [apt["id"]]


class TestDetail:
    def test_get(self, api_client, created):
        resp = api_client.get(f"/api/v1/records/{created['id']}")
        assert resp.status_code == 200
        assert resp.json()["apartment_name"] == "래미안 대치팰리스"

    def test_not_found(self, api_client):
        resp = api_client.get(f"/api/v1/records/{uuid.uuid4()}")
        assert resp.status_code == 404
        assert resp.json()["title"] == "Not Found"


class TestUpdate:
    def test_partial_update(self, api_client, auth_headers, created):
        resp = api_client.patch(
            f"/api/v1/records/{created['id']}", json={"memo": "남향, 리모델링 필요"}, headers=auth_headers
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["memo"] == "남향, 리모델링 필요"
        assert body["price_in_hundred_million"] == 15.5

    def test_flag_change_recomputes_ltv_rate(self, api_client, auth_headers, created):
        resp = api_client.patch(
            f"/api/v1/records/{created['id']}", json={"is_ltv_regulated": False}, headers=auth_headers
        )
        assert resp.status_code == 200
        assert resp.json()["is_ltv_regulated"] is False
        assert resp.json()["ltv_rate"] == 70

    def test_rejects_non_finite_price(self, api_client, auth_headers, created):
        resp = api_client.patch(
            f"/api/v1/records/{created['id']}",
            content=b'{"price_in_hundred_million": 1e400}',
            headers={**auth_headers, "Content-Type": "application/json"},
        )
        assert resp.status_code == 422

    def test_clear_nullable_field(self, api_client, auth_headers, created):
        resp = api_client.patch(f"/api/v1/records/{created['id']}", json={"apartment_name": None}, headers=auth_headers)
        assert resp.json()["apartment_name"] is None

    def test_null_required_field_ignored(self, api_client, auth_headers, created):
        resp = api_client.patch(
            f"/api/v1/records/{created['id']}", json={"region_gu": None, "memo": "x"}, headers=auth_headers
        )
        assert resp.json()["region_gu"] == "강남구"

    def test_empty_update(self, api_client, auth_headers, created):
        resp = api_client.patch(f"/api/v1/records/{created['id']}", json={}, headers=auth_headers)
        assert resp.status_code == 400

    def test_requires_sign_in(self, api_client, created):
        assert api_client.patch(f"/api/v1/records/{created['id']}", json={"memo": "x"}).status_code == 401

    def test_not_found(self, api_client, auth_headers):
        resp = api_client.patch(f"/api/v1/records/{uuid.uuid4()}", json={"memo": "x"}, headers=auth_headers)
        assert resp.status_code == 404


class TestDelete:
    def test_delete(self, api_client, auth_headers, created):
        resp = api_client.delete(f"/api/v1/records/{created['id']}", headers=auth_headers)
        assert resp.status_code == 204
        assert api_client.get(f"/api/v1/records/{created['id']}").status_code == 404

    def test_not_found(self, api_client, auth_headers):
        assert api_client.delete(f"/api/v1/records/{uuid.uuid4()}", headers=auth_headers).status_code == 404


class TestPhotosAndComments:
    def test_add_photos(self, api_client, auth_headers, created):
        url = f"/api/v1/records/{created['id']}/photos"
        api_client.post(url, json={"urls": ["https://cdn/1.jpg"]}, headers=auth_headers)
        resp = api_client.post(url, json={"urls": ["https://cdn/2.jpg", "https://cdn/3.jpg"]}, headers=auth_headers)
        photos = resp.json()["photos"]
        assert [p["photo_order"] for p in photos] == [0, 1, 2]
        assert photos[-1]["photo_url"] == "https://cdn/3.jpg"

    def test_empty_photo_list_rejected(self, api_client, auth_headers, created):
        resp = api_client.post(f"/api/v1/records/{created['id']}/photos", json={"urls": []}, headers=auth_headers)
        assert resp.status_code == 422

    def test_comments(self, api_client, auth_headers, token_for, created):
        url = f"/api/v1/records/{created['id']}/comments"
        resp = api_client.post(url, json={"content": "학군 최고"}, headers=auth_headers)
        assert resp.status_code == 201
        assert resp.json()["user_id"] == "user-1"

        other = {"Authorization": f"Bearer {token_for('user-2')}"}
        api_client.post(url, json={"content": "주차 불편"}, headers=other)

        detail = api_client.get(f"/api/v1/records/{created['id']}").json()
        assert [c["content"] for c in detail["comments"]] == ["학군 최고", "주차 불편"]
        assert [c["user_id"] for c in detail["comments"]] == ["user-1", "user-2"]

    def test_comment_requires_sign_in(self, api_client, created):
        resp = api_client.post(f"/api/v1/records/{created['id']}/comments", json={"content": "hi"})
        assert resp.status_code == 401


class TestRecordRange:
    def test_defaults(self, api_client, created):
        resp = api_client.get(f"/api/v1/records/{created['id']}/range")
        body = resp.json()
        assert body["price"] == 15.5
        assert body["actual_asset"] == pytest.approx(9.3)
        assert body["ltv_percent"] == 40

    def test_first_time_buyer_does_not_touch_record(self, api_client, created):
        resp = api_client.get(
            f"/api/v1/records/{created['id']}/range", params={"first_time_buyer": "true", "slider_percent": 10}
        )
        assert resp.json()["ltv_percent"] == 70
        assert resp.json()["actual_loan_amount"] == pytest.approx(13.95)
        assert api_client.get(f"/api/v1/records/{created['id']}").json()["ltv_rate"] == 40

    def test_bad_slider(self, api_client, created):
        resp = api_client.get(f"/api/v1/records/{created['id']}/range", params={"slider_percent": 150})
        assert resp.status_code == 422
