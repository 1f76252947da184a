from __future__ import annotations

import uuid


def _create(api_client, name="a", ext="jpg", directory="api"):
    return api_client.post(
        "/api/media",
        json={"filename": name, "extension": ext, "directory": directory, "mime_type": "image/jpeg", "size": 10},
    )


def test_healthz(api_client):
    r = api_client.get("/healthz")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["ok"] is True
    assert "posts" in body["mediable_types"]


def test_create_get_delete_media(api_client):
    r = _create(api_client)
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["filename"] == "a"
    assert created["disk"] == "local"

    r = api_client.get(f"/api/media/{created['id']}")
    assert r.status_code == 200
    assert r.json()["id"] == created["id"]

    r = api_client.get("/api/media", params={"limit": 10})
    assert created["id"] in [m["id"] for m in r.json()]

    assert api_client.delete(f"/api/media/{created['id']}").status_code == 204
    assert api_client.get(f"/api/media/{created['id']}").status_code == 404


def test_duplicate_media_path_conflicts(api_client):
    assert _create(api_client, "dupe").status_code == 201
    r = _create(api_client, "dupe")
    assert r.status_code == 409, r.text
    # the request session is still usable
    assert _create(api_client, "other").status_code == 201


def test_unknown_media_is_404(api_client):
    assert api_client.get(f"/api/media/{uuid.uuid4()}").status_code == 404
