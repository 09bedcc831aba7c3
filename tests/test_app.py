"""Tests for app-wide error rendering and CORS."""


def test_unknown_route_renders_error(client) -> None:
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


def test_invalid_body_is_400(client) -> None:
    response = client.post("/api/gemini/generate-recipe", json={"labels": ["a"], "emotions": "happy"})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request body"


def test_cors_allows_frontend_origin(client) -> None:
    response = client.options(
        "/api/photos",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "POST"},
    )

    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
