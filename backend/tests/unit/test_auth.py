import pytest
from fastapi import HTTPException

from app.infra import jwt as jwt_helper
from app.infra.auth import get_current_user, resolve_socket_user, verify_access_jwt
from app.settings import settings


def test_verify_access_jwt_reads_sub_and_email():
	token = jwt_helper.encode_access({"sub": "user-1", "email": "u1@campus.edu"})

	user = verify_access_jwt(token)

	assert user.id == "user-1"
	assert user.email == "u1@campus.edu"


def test_wrong_audience_is_rejected():
	token = jwt_helper.encode_access({"sub": "user-1", "aud": "someone-else"})

	with pytest.raises(HTTPException) as exc:
		verify_access_jwt(token)

	assert exc.value.status_code == 401


def test_missing_sub_is_rejected():
	token = jwt_helper.encode_access({"sub": "  "})

	with pytest.raises(HTTPException):
		verify_access_jwt(token)


@pytest.mark.asyncio
async def test_dev_header_only_outside_production(monkeypatch):
	assert (await get_current_user(x_user_id="user-2", credentials=None)).id == "user-2"

	monkeypatch.setattr(settings, "environment", "production")
	with pytest.raises(HTTPException):
		await get_current_user(x_user_id="user-2", credentials=None)


def test_socket_handshake_accepts_token_or_dev_header(monkeypatch):
	token = jwt_helper.encode_access({"sub": "user-3"})

	assert resolve_socket_user({}, {"token": token}).id == "user-3"
	assert resolve_socket_user({"asgi.scope": {"headers": [(b"x-user-id", b"user-4")]}}).id == "user-4"
	assert resolve_socket_user({}, {"token": "garbage"}) is None

	monkeypatch.setattr(settings, "environment", "production")
	assert resolve_socket_user({}, {"userId": "user-5"}) is None
