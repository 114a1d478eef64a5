"""
End-to-end checks of the routers against file-backed services in a temp dir.
"""
from __future__ import annotations

import inspect
import json
import sys
from dataclasses import replace
from pathlib import Path

import pytest

# make the site_backend package importable for local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fastapi.routing import APIRoute  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from site_backend.app import create_app  # noqa: E402
from site_backend.core.config import get_settings  # noqa: E402
from site_backend.core.security import hash_password  # noqa: E402

NEW_POST = {
    "title": "Hello",
    "slug": "hello-world",
    "body": "First post",
    "tags": ["intro"],
    "authorId": "admin",
    "status": "posted",
}


@pytest.fixture()
def settings(tmp_path, monkeypatch):
    monkeypatch.setenv("DATA_PATH", str(tmp_path / "data"))
    monkeypatch.setenv("STORAGE_BACKEND", "file")
    get_settings.cache_clear()
    yield replace(get_settings(), admin_username="admin", admin_password_hash=hash_password("s3cret"))
    get_settings.cache_clear()


@pytest.fixture()
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture()
def auth(client):
    resp = client.post("/auth/login", json={"username": "admin", "password": "s3cret"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['token']}"}


def test_login_with_wrong_password_is_unauthorized(client):
    resp = client.post("/auth/login", json={"username": "admin", "password": "nope"})

    assert resp.status_code == 401


def test_blog_crud_and_status_codes(client, auth, settings):
    assert client.post("/api/blog", json=NEW_POST).status_code == 401

    created = client.post("/api/blog", json=NEW_POST, headers=auth)
    assert created.status_code == 200
    assert created.json()["slug"] == "hello-world"

    assert client.post("/api/blog", json=NEW_POST, headers=auth).status_code == 409
    assert client.post("/api/blog", json={"title": "x"}, headers=auth).status_code == 400

    listing = client.get("/api/blog", params={"page": "1", "pagination": "abc"})
    assert listing.status_code == 200
    assert [p["slug"] for p in listing.json()["posts"]] == ["hello-world"]
    assert listing.json()["morePages"] is False

    updated = client.put("/api/blog/hello-world", json={**NEW_POST, "slug": "renamed"}, headers=auth)
    assert updated.status_code == 200
    assert updated.json()["id"] == created.json()["id"]
    assert updated.json()["updateAuthorId"] == "admin"

    assert client.get("/api/blog/hello-world").status_code == 404
    assert client.get("/api/blog/renamed").json()["title"] == "Hello"

    on_disk = json.loads((settings.data_path / "blog" / "blog_data.json").read_text(encoding="utf-8"))
    assert [p["slug"] for p in on_disk] == ["renamed"]

    assert client.delete("/api/blog/renamed", headers=auth).status_code == 200
    assert client.delete("/api/blog/renamed", headers=auth).status_code == 404


def test_drafts_are_hidden_from_public_listing(client, auth):
    client.post("/api/blog", json={**NEW_POST, "status": "draft"}, headers=auth)

    assert client.get("/api/blog").json()["posts"] == []
    assert len(client.get("/api/blog/all", headers=auth).json()["posts"]) == 1


def test_notes_require_auth(client, auth):
    assert client.get("/api/notes").status_code == 401

    note = client.post("/api/notes", json={"title": "t", "content": "c", "author": "admin"}, headers=auth).json()
    edited = client.put(f"/api/notes/{note['id']}", json={"title": "t2", "content": "c2", "author": "x"}, headers=auth)

    assert edited.status_code == 200
    assert edited.json()["title"] == "t2"
    assert edited.json()["author"] == "admin"
    assert client.get("/api/notes", headers=auth).json()["notes"][0]["content"] == "c2"
    assert client.get("/api/notes/missing", headers=auth).status_code == 404


def test_upload_download_and_delete_file(client, auth):
    resp = client.post(
        "/api/files/upload",
        files=[("files", ("notes.txt", b"some text", "text/plain"))],
        data={"isPrivate": "true"},
        headers=auth,
    )
    assert resp.status_code == 200
    [details] = resp.json()

    assert client.get(f"/api/files/{details['filename']}").status_code == 404
    download = client.get(f"/api/files/{details['filename']}", headers=auth)
    assert download.status_code == 200
    assert download.content == b"some text"

    listing = client.get("/api/files", headers=auth).json()
    assert listing["totalFiles"] == 1

    deleted = client.post("/api/files/delete", json={"names": [details["filename"]]}, headers=auth)
    assert deleted.status_code == 200
    assert deleted.json()[0]["errors"] == []
    assert client.get(f"/api/files/{details['filename']}", headers=auth).status_code == 404


def test_vice_bank_flow(client, auth):
    user = client.post("/api/vice_bank/users", json={"name": "Alice"}, headers=auth).json()
    action = client.post(
        "/api/vice_bank/actions",
        json={
            "vbUserId": user["id"],
            "name": "Reading",
            "conversionUnit": "pages",
            "depositsPer": 10,
            "tokensPer": 1,
            "minDeposit": 1,
        },
        headers=auth,
    ).json()

    deposit = client.post(
        "/api/vice_bank/deposits",
        json={"vbUserId": user["id"], "actionId": action["id"], "depositQuantity": 20},
        headers=auth,
    )
    assert deposit.status_code == 200
    assert client.get(f"/api/vice_bank/users/{user['id']}", headers=auth).json()["currentTokens"] == pytest.approx(2)

    listed = client.get("/api/vice_bank/deposits", params={"userId": user["id"]}, headers=auth).json()
    assert len(listed["deposits"]) == 1
    assert client.get("/api/vice_bank/deposits", headers=auth).status_code == 400

    bad = client.post(
        "/api/vice_bank/deposits",
        json={"vbUserId": user["id"], "actionId": action["id"], "depositQuantity": "lots"},
        headers=auth,
    )
    assert bad.status_code == 400
    assert client.delete("/api/vice_bank/actions/missing", headers=auth).status_code == 404


def test_backup_endpoint_writes_backup_files(client, auth, settings):
    client.post("/api/blog", json=NEW_POST, headers=auth)

    resp = client.post("/api/backup", headers=auth)

    assert resp.status_code == 200
    backups = list((settings.data_path / "blog" / "backup").iterdir())
    assert len(backups) == 1
    assert json.loads(backups[0].read_text(encoding="utf-8"))[0]["slug"] == "hello-world"


def test_non_string_blog_status_is_bad_request(client, auth):
    assert client.post("/api/blog", json={**NEW_POST, "status": ["posted"]}, headers=auth).status_code == 400
    assert client.post("/api/blog", json={**NEW_POST, "status": {"s": 1}}, headers=auth).status_code == 400

    client.post("/api/blog", json=NEW_POST, headers=auth)
    resp = client.put("/api/blog/hello-world", json={**NEW_POST, "status": ["draft"]}, headers=auth)

    assert resp.status_code == 400
    assert resp.json()["detail"]["fields"] == ["status"]


def test_vice_bank_update_keeps_owner(client, auth):
    alice = client.post("/api/vice_bank/users", json={"name": "Alice"}, headers=auth).json()
    bob = client.post("/api/vice_bank/users", json={"name": "Bob"}, headers=auth).json()
    price = client.post(
        "/api/vice_bank/purchase_prices",
        json={"vbUserId": alice["id"], "name": "Candy", "price": 2},
        headers=auth,
    ).json()
    url = f"/api/vice_bank/purchase_prices/{price['id']}"

    assert client.put(url, json={**price, "vbUserId": "ghost"}, headers=auth).status_code == 404
    assert client.put(url, json={**price, "vbUserId": bob["id"]}, headers=auth).status_code == 400

    renamed = client.put(url, json={**price, "name": "Cake"}, headers=auth)
    assert renamed.status_code == 200
    assert renamed.json()["vbUserId"] == alice["id"]
    assert renamed.json()["name"] == "Cake"


def test_write_routes_run_off_the_event_loop(client):
    write_routes = [
        route
        for route in client.app.routes
        if isinstance(route, APIRoute) and route.methods & {"POST", "PUT", "DELETE"}
    ]

    assert write_routes
    assert [route.path for route in write_routes if inspect.iscoroutinefunction(route.endpoint)] == []
