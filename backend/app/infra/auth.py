"""Authentication helpers for FastAPI endpoints.

The identity provider owns sign-in; this module only verifies the bearer token
it issued and turns it into an AuthenticatedUser. Dev headers are honoured only
in development.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.infra import jwt as jwt_helper
from app.settings import settings


@dataclass(slots=True)
class AuthenticatedUser:
	id: str
	email: Optional[str] = None


_bearer_scheme = HTTPBearer(auto_error=False)


def verify_access_jwt(token: str) -> AuthenticatedUser:
	"""Decode and validate an access JWT and return an AuthenticatedUser."""
	try:
		payload = jwt_helper.decode_access(token)
	except Exception:
		# Normalise all decode failures to invalid_token for the API surface
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")

	email = payload.get("email")
	return AuthenticatedUser(
		id=str(payload["sub"]).strip(),
		email=str(email) if email else None,
	)


async def get_current_user(
	x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthenticatedUser:
	"""Resolve the authenticated user.

	In development we allow a simple header. In all other environments, headers are
	ignored and a valid Bearer JWT is required.
	"""
	if credentials and credentials.scheme.lower() == "bearer":
		return verify_access_jwt(credentials.credentials)

	if settings.is_dev() and x_user_id:
		return AuthenticatedUser(id=x_user_id)

	raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")


def _scope_header(scope: dict, name: str) -> Optional[str]:
	target = name.encode().lower()
	for key, value in scope.get("headers", []):
		if key.lower() == target:
			return value.decode()
	return None


def resolve_socket_user(environ: dict, auth: Optional[dict] = None) -> Optional[AuthenticatedUser]:
	"""Authenticate a Socket.IO handshake; ``None`` when it carries no usable identity."""
	scope = environ.get("asgi.scope", environ)
	payload = auth or environ.get("auth") or scope.get("auth") or {}
	token = payload.get("token")
	if not token:
		header = _scope_header(scope, "authorization") or ""
		if header.lower().startswith("bearer "):
			token = header[7:].strip()
	if token:
		try:
			return verify_access_jwt(token)
		except HTTPException:
			return None
	if settings.is_dev():
		user_id = payload.get("userId") or _scope_header(scope, "x-user-id")
		if user_id:
			return AuthenticatedUser(id=str(user_id))
	return None
