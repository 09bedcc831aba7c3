"""Tests for saving, listing and deleting history entries."""

from __future__ import annotations

from pathlib import Path

from conftest import make_image
from picplate.utils.images import b64encode_image

ENTRY = {
    "email": "cook@example.com",
    "photoUrl": "https://lh3/photo",
    "photoId": "p1",
    "recipePrompt": "# Soup",
    "restaurantPrompt": "1. Soup Place",
}


def test_save_requires_fields(client) -> None:
    response = client.post("/api/history/save", json={"email": "cook@example.com"})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields."}


def test_save_and_get_newest_first(client) -> None:
    first = client.post("/api/history/save", json=ENTRY).json()
    second = client.post("/api/history/save", json={**ENTRY, "recipePrompt": "# Stew"}).json()

    assert first["message"] == "History saved successfully."
    history = client.post("/api/history/get", json={"email": "cook@example.com"}).json()["history"]
    assert [h["id"] for h in history] == [second["id"], first["id"]]
    assert history[1]["photoUrl"] == "https://lh3/photo"
    assert history[1]["photoId"] == "p1"
    assert history[0]["recipePrompt"] == "# Stew"


def test_save_stores_image(client, tmp_path: Path) -> None:
    png = make_image(size=(8, 8))

    client.post("/api/history/save", json={**ENTRY, "imageData": b64encode_image(png)})

    entry = client.post("/api/history/get", json={"email": "cook@example.com"}).json()["history"][0]
    assert entry["photoUrl"].startswith("/api/history/images/cook_example_com_")
    stored = client.get(entry["photoUrl"])
    assert stored.status_code == 200
    assert stored.headers["content-type"] == "image/png"
    assert stored.content == png
    assert len(list((tmp_path / "history").iterdir())) == 1


def test_bad_image_data_keeps_photo_url(client) -> None:
    client.post("/api/history/save", json={**ENTRY, "imageData": "***"})

    entry = client.post("/api/history/get", json={"email": "cook@example.com"}).json()["history"][0]
    assert entry["photoUrl"] == "https://lh3/photo"


def test_get_requires_email(client) -> None:
    assert client.post("/api/history/get", json={}).status_code == 400


def test_delete(client) -> None:
    saved = client.post("/api/history/save", json=ENTRY).json()

    response = client.delete(f"/api/history/delete/cook@example.com/{saved['id']}")

    assert response.json() == {"message": "History entry deleted successfully."}
    assert client.post("/api/history/get", json={"email": "cook@example.com"}).json() == {"history": []}


def test_delete_ignores_other_users_entries(client) -> None:
    saved = client.post("/api/history/save", json=ENTRY).json()

    client.delete(f"/api/history/delete/someone@example.com/{saved['id']}")

    assert len(client.post("/api/history/get", json={"email": "cook@example.com"}).json()["history"]) == 1


def test_missing_stored_image(client) -> None:
    assert client.get("/api/history/images/nope.png").status_code == 404
    assert client.get("/api/history/images/..%2F..%2Fetc%2Fpasswd").status_code == 404


def test_stored_image_keeps_its_format(client) -> None:
    jpeg = make_image(size=(8, 8), fmt="JPEG")

    client.post("/api/history/save", json={**ENTRY, "imageData": b64encode_image(jpeg)})

    entry = client.post("/api/history/get", json={"email": "cook@example.com"}).json()["history"][0]
    assert entry["photoUrl"].endswith(".jpeg")
    stored = client.get(entry["photoUrl"])
    assert stored.headers["content-type"] == "image/jpeg"
    assert stored.content == jpeg
