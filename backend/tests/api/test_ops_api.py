import pytest

from app.settings import settings


@pytest.mark.asyncio
async def test_liveness(api_client):
	resp = await api_client.get("/health/live")

	assert resp.status_code == 200
	assert resp.json() == {"status": "ok"}
	assert resp.headers["X-Request-Id"]


@pytest.mark.asyncio
async def test_request_id_is_echoed_in_errors(api_client):
	resp = await api_client.get("/friends", headers={"X-Request-Id": "req-123"})

	assert resp.status_code == 401
	assert resp.json()["request_id"] == "req-123"
	assert resp.headers["X-Request-Id"] == "req-123"


@pytest.mark.asyncio
async def test_metrics_public_by_default(api_client, monkeypatch):
	monkeypatch.setattr(settings, "obs_metrics_public", True)

	resp = await api_client.get("/metrics")

	assert resp.status_code == 200
	assert "campus_http_requests_total" in resp.text


@pytest.mark.asyncio
async def test_metrics_fail_closed_without_token(api_client, monkeypatch):
	monkeypatch.setattr(settings, "obs_metrics_public", False)
	monkeypatch.setattr(settings, "obs_admin_token", None)

	resp = await api_client.get("/metrics", headers={"X-Admin-Token": "whatever"})

	assert resp.status_code == 403
	assert resp.json()["detail"] == "admin_token_not_configured"


@pytest.mark.asyncio
async def test_metrics_with_admin_token(api_client, monkeypatch):
	monkeypatch.setattr(settings, "obs_metrics_public", False)
	monkeypatch.setattr(settings, "obs_admin_token", "secret-token")

	wrong = await api_client.get("/metrics", headers={"X-Admin-Token": "nope"})
	right = await api_client.get("/metrics", headers={"Authorization": "Bearer secret-token"})

	assert wrong.status_code == 403
	assert right.status_code == 200
