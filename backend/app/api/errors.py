"""Global error handlers and the mapping from domain errors to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.request_id import get_request_id
from app.domain.chat.exceptions import ChatError, ChatInvalid, ChatNotFound, NotAMember
from app.domain.profiles.exceptions import ProfileError, ProfileRequired
from app.domain.social.exceptions import (
    RequestConflict,
    RequestForbidden,
    RequestGone,
    RequestNotFound,
    SocialError,
)
from app.infra.postgres import TRANSIENT_ERRORS
from app.infra.rate_limit import RateLimitExceeded

logger = logging.getLogger(__name__)

DomainError = (SocialError, ChatError, ProfileError, RateLimitExceeded)
StorageUnavailable = TRANSIENT_ERRORS + (RedisConnectionError, RedisTimeoutError)


def to_http(exc: Exception) -> HTTPException:
    """Translate a domain exception into the HTTPException the API returns."""
    reason = getattr(exc, "reason", None)
    if isinstance(exc, RateLimitExceeded):
        return HTTPException(status.HTTP_429_TOO_MANY_REQUESTS, detail=reason or "rate_limit")
    if isinstance(exc, RequestConflict):
        return HTTPException(status.HTTP_409_CONFLICT, detail=reason)
    if isinstance(exc, (RequestForbidden, NotAMember)):
        return HTTPException(status.HTTP_403_FORBIDDEN, detail=reason)
    if isinstance(exc, RequestGone):
        return HTTPException(status.HTTP_410_GONE, detail=reason)
    if isinstance(exc, ProfileRequired):
        return HTTPException(status.HTTP_428_PRECONDITION_REQUIRED, detail=reason)
    if isinstance(exc, (RequestNotFound, ChatNotFound, ProfileError)):
        return HTTPException(status.HTTP_404_NOT_FOUND, detail=reason)
    if isinstance(exc, ChatInvalid):
        return HTTPException(status.HTTP_400_BAD_REQUEST, detail=reason)
    return HTTPException(status.HTTP_400_BAD_REQUEST, detail=reason or str(exc))


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
        rid = get_request_id(request)
        payload = {"detail": exc.detail, "request_id": rid}
        return JSONResponse(status_code=exc.status_code, content=payload, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
        rid = get_request_id(request)
        payload = {"detail": "validation_error", "errors": exc.errors(), "request_id": rid}
        return JSONResponse(status_code=422, content=jsonable_encoder(payload))

    async def domain_exc_handler(request: Request, exc: Exception):
        http_exc = to_http(exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content={"detail": http_exc.detail, "request_id": get_request_id(request)},
        )

    async def transient_exc_handler(request: Request, exc: Exception):
        logger.warning("storage unavailable", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "storage_unavailable", "request_id": get_request_id(request)},
        )

    for exc_type in DomainError:
        app.add_exception_handler(exc_type, domain_exc_handler)
    for exc_type in StorageUnavailable:
        app.add_exception_handler(exc_type, transient_exc_handler)
