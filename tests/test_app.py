import logging

from fastapi.testclient import TestClient

from conftest import PNG_BYTES, FakeVisionService
from core.dependencies import get_vision_service
from core.logging import request_id_var, setup_logging
from main import app


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_api_info_lists_endpoints(client):
    response = client.get("/api")

    assert response.status_code == 200
    endpoints = response.json()["endpoints"]
    assert set(endpoints) == {
        "POST /api/caption",
        "POST /api/caption/custom",
        "GET /api/caption/health",
    }


def test_unknown_route_returns_envelope(client):
    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Endpoint not found"
    assert "timestamp" in body


def test_responses_carry_request_id(client):
    response = client.get("/api/caption/health")

    assert len(response.headers["X-Request-ID"]) == 8
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Frame-Options" not in response.headers


def test_unexpected_route_error_returns_500_envelope():
    app.dependency_overrides[get_vision_service] = lambda: FakeVisionService(error=RuntimeError("boom"))
    try:
        with TestClient(app, raise_server_exceptions=False) as test_client:
            response = test_client.post("/api/caption", files={"image": ("a.png", PNG_BYTES, "image/png")})
    finally:
        app.dependency_overrides.pop(get_vision_service, None)

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Internal server error"
    assert "boom" not in response.text


def test_health_reports_vision_service(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["services"]["vision"]["model_id"] == "gpt-4o-vision"


def test_health_degraded_without_configuration(client, set_env):
    set_env(AZURE_OPENAI_MODEL_ID=None)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"
    assert response.json()["services"]["vision"]["status"] == "unhealthy"


def test_setup_logging_writes_request_id_to_file(tmp_path):
    log_file = tmp_path / "logs" / "service.log"

    setup_logging(log_level="INFO", log_file=str(log_file))
    token = request_id_var.set("abc12345")
    try:
        logging.getLogger("caption.test").info("hello from test")
    finally:
        request_id_var.reset(token)
    logging.getLogger("caption.test").info("outside a request")
    setup_logging(log_level="INFO", log_file="")

    lines = log_file.read_text().splitlines()
    assert any("[abc12345]" in line and "hello from test" in line for line in lines)
    assert any("[-]" in line and "outside a request" in line for line in lines)
    assert not any("\033[" in line for line in lines)
