from __future__ import annotations

from fastapi.testclient import TestClient


def _client() -> TestClient:
    import app as app_module

    return TestClient(app_module.create_app())


def test_add_list_delete(reload_endpoints):
    client = _client()

    r = client.post("/api/graduates", json={"code": "A1", "name": "Alpha", "year": 2022})
    assert r.status_code == 200
    first = r.json()["storeId"]
    second = client.post("/api/graduates", json={"code": "B2", "name": "Beta", "status": "Approved"}).json()["storeId"]

    body = client.get("/api/graduates").json()
    assert [g["storeId"] for g in body["graduates"]] == [second, first]
    assert body["summary"] == {"total": 2, "approved": 1, "underReview": 1}

    alpha = body["graduates"][1]
    assert alpha["status"] == "Under Review"
    assert alpha["feedback"] == ""
    assert alpha["fromLocalCache"] is False
    assert alpha["createdAt"]

    r = client.delete(f"/api/graduates/{first}")
    assert r.status_code == 200
    assert r.json() == {"deleted": True}

    r = client.delete(f"/api/graduates/{first}")
    assert r.status_code == 404


def test_blank_id_is_rejected(reload_endpoints):
    client = _client()
    r = client.delete("/api/graduates/%20")
    assert r.status_code == 400


def test_migrate_and_initial_data(reload_endpoints):
    client = _client()

    r = client.post("/api/graduates/migrate")
    assert r.status_code == 200
    assert r.json() == {"migratedCount": 0, "totalCount": 0}

    r = client.post("/api/graduates/initial-data")
    assert r.json() == {"created": 2}

    # The seed also filled the local cache, so migrating copies both again.
    r = client.post("/api/graduates/migrate")
    assert r.json() == {"migratedCount": 2, "totalCount": 2}

    graduates = client.get("/api/graduates").json()["graduates"]
    assert len(graduates) == 4
    assert sorted(g["code"] for g in graduates) == ["20231001", "20231001", "20231002", "20231002"]
    assert sum(1 for g in graduates if g["fromLocalCache"]) == 2
