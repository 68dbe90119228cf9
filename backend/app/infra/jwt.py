"""JWT helpers for access tokens issued by the hosted identity provider.

Tokens are HS256-signed with the provider's shared secret. The provider puts the
user id in `sub` and uses a fixed audience for signed-in users.
"""

from __future__ import annotations

import time
from typing import Any, Dict

import jwt
from jwt import InvalidTokenError

from app.settings import settings


def encode_access(payload: dict[str, object], *, ttl_seconds: int = 3600) -> str:
    """Encode an access token the way the identity provider does (dev tooling and tests)."""
    now = int(time.time())
    body: Dict[str, Any] = {"aud": settings.auth_jwt_audience, "iat": now, "exp": now + ttl_seconds}
    body.update(payload)
    return jwt.encode(body, settings.auth_jwt_secret, algorithm="HS256")


def decode_access(token: str) -> dict[str, object]:
    """Decode and validate an access token.

    Raises jwt.InvalidTokenError subclasses on failure.
    """
    payload = jwt.decode(
        token,
        settings.auth_jwt_secret,
        algorithms=["HS256"],
        audience=settings.auth_jwt_audience,
        leeway=5,
        options={"require": ["exp", "sub"]},
    )
    if not str(payload.get("sub") or "").strip():
        raise InvalidTokenError("missing_claim:sub")
    return payload
