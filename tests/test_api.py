"""
FastAPI endpoint tests for the Land Registry API.

Uses httpx and the FastAPI TestClient, so no real server is needed.
"""

from __future__ import annotations

import api
import pytest
from api import app
from fastapi.testclient import TestClient

from land_registry.registry import LandRegistry

client = TestClient(app)

ADMIN = "0xadadadadadadadadadadadadadadadadadadadad"
ALICE = "0xa11ce00000000000000000000000000000000001"
BOB = "0xb0b0000000000000000000000000000000000002"

PARCEL = {
    "plot_number": "PLT-001",
    "area": "Andheri",
    "district": "Mumbai",
    "city": "Mumbai",
    "state": "Maharashtra",
    "area_sq_yd": 500,
}


def _as(identity: str) -> dict[str, str]:
    return {"X-Caller-Identity": identity}


@pytest.fixture(autouse=True)
def _fresh_registry(clock) -> None:
    """Give every test its own registry (bypasses lifespan)."""
    api._registry = LandRegistry(admin_identity=ADMIN, clock=clock)
    yield  # type: ignore[misc]
    api._registry = None


@pytest.fixture
def land_id() -> int:
    resp = client.post("/lands", json=PARCEL, headers=_as(ALICE))
    assert resp.status_code == 201
    return resp.json()["id"]


class TestHealthEndpoint:
    def test_health_response_shape(self) -> None:
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["land_count"] == 0
        assert data["admin_configured"] is True

    def test_uninitialised_returns_503(self) -> None:
        api._registry = None
        assert client.get("/health").status_code == 503


class TestRegistration:
    def test_register_returns_id(self, land_id: int) -> None:
        assert land_id == 1
        assert client.get("/lands/count").json() == {"land_count": 1}

    def test_duplicate_returns_409(self, land_id: int) -> None:
        resp = client.post("/lands", json={**PARCEL, "area_sq_yd": 300}, headers=_as(BOB))
        assert resp.status_code == 409
        assert resp.json()["code"] == "DUPLICATE_PARCEL"

    def test_empty_field_returns_422_with_problems(self) -> None:
        resp = client.post("/lands", json={**PARCEL, "plot_number": ""}, headers=_as(ALICE))
        assert resp.status_code == 422
        body = resp.json()
        assert body["code"] == "VALIDATION_FAILED"
        assert body["details"]["problems"][0]["field"] == "plot_number"

    def test_missing_field_returns_422(self) -> None:
        body = {k: v for k, v in PARCEL.items() if k != "city"}
        assert client.post("/lands", json=body, headers=_as(ALICE)).status_code == 422

    def test_missing_caller_returns_403(self) -> None:
        resp = client.post("/lands", json=PARCEL)
        assert resp.status_code == 403
        assert resp.json()["code"] == "NOT_AUTHORIZED"


class TestTransferWorkflow:
    def test_full_cycle(self, land_id: int) -> None:
        resp = client.post(f"/lands/{land_id}/sale", headers=_as(ALICE))
        assert resp.status_code == 200
        assert resp.json()["status"] == "LISTED"

        resp = client.post(f"/lands/{land_id}/transfer-request", headers=_as(BOB))
        assert resp.json()["transfer_request"] == BOB

        pending = client.get(f"/owners/{ALICE}/pending-requests").json()
        assert pending["land_ids"] == [land_id]

        resp = client.post(f"/lands/{land_id}/approve", headers=_as(ALICE))
        record = resp.json()
        assert record["owner"] == BOB
        assert record["is_for_sale"] is False
        assert record["status"] == "UNLISTED"

        history = client.get(f"/lands/{land_id}/history").json()
        assert [h["owner"] for h in history] == [ALICE, BOB]
        assert client.get(f"/owners/{BOB}/lands").json()["land_ids"] == [land_id]

    def test_non_owner_listing_returns_403(self, land_id: int) -> None:
        resp = client.post(f"/lands/{land_id}/sale", headers=_as(BOB))
        assert resp.status_code == 403

    def test_request_unlisted_returns_409(self, land_id: int) -> None:
        resp = client.post(f"/lands/{land_id}/transfer-request", headers=_as(BOB))
        assert resp.status_code == 409
        assert resp.json()["code"] == "NOT_FOR_SALE"

    def test_deny_keeps_listing(self, land_id: int) -> None:
        client.post(f"/lands/{land_id}/sale", headers=_as(ALICE))
        client.post(f"/lands/{land_id}/transfer-request", headers=_as(BOB))
        record = client.post(f"/lands/{land_id}/deny", headers=_as(ALICE)).json()
        assert record["owner"] == ALICE
        assert record["is_for_sale"] is True
        assert record["transfer_request"] == "0x0000000000000000000000000000000000000000"

        resp = client.post(f"/lands/{land_id}/approve", headers=_as(ALICE))
        assert resp.status_code == 409
        assert resp.json()["code"] == "NO_PENDING_REQUEST"

    def test_for_sale_listing(self, land_id: int) -> None:
        assert client.get("/lands/for-sale").json() == []
        client.post(f"/lands/{land_id}/sale", headers=_as(ALICE))
        assert [r["id"] for r in client.get("/lands/for-sale").json()] == [land_id]


class TestReads:
    def test_verify_unknown_is_200_sentinel(self) -> None:
        resp = client.get("/lands/5/verify")
        assert resp.status_code == 200
        assert resp.json()["exists"] is False
        assert resp.json()["owner"] == "0x0000000000000000000000000000000000000000"

    def test_history_unknown_is_404(self) -> None:
        resp = client.get("/lands/5/history")
        assert resp.status_code == 404
        assert resp.json()["code"] == "LAND_NOT_FOUND"

    def test_verify_known(self, land_id: int) -> None:
        data = client.get(f"/lands/{land_id}/verify").json()
        assert data["plot_number"] == "PLT-001"
        assert data["owner"] == ALICE
        assert data["exists"] is True

    def test_all_lands_admin_only(self, land_id: int) -> None:
        assert client.get("/lands", headers=_as(ALICE)).status_code == 403
        resp = client.get("/lands", headers=_as(ADMIN))
        assert resp.status_code == 200
        assert [r["id"] for r in resp.json()] == [land_id]
