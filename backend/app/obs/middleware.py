"""Request id propagation, access logs and HTTP metrics."""

from __future__ import annotations

import time
from uuid import uuid4

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from app.obs import logging as obs_logging
from app.obs import metrics
from app.settings import settings

REQUEST_ID_HEADER = "X-Request-Id"


def _route_template(request: Request) -> str:
	# Templates keep metric label cardinality bounded ("/conversations/{conversation_id}/messages").
	route = request.scope.get("route")
	return getattr(route, "path", None) or request.url.path


class ObservabilityMiddleware(BaseHTTPMiddleware):
	"""Tag each request with an id; when observability is on, also time and log it."""

	def __init__(self, app, *, enabled: bool = True) -> None:
		super().__init__(app)
		self._enabled = enabled
		self._logger = obs_logging.get_logger("campus_connect.http")

	async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
		request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
		setattr(request.state, obs_logging.REQUEST_ID_ATTR, request_id)
		if self._enabled and settings.obs_enabled:
			response = await self._observe(request, call_next, request_id)
		else:
			response = await call_next(request)
		response.headers.setdefault(REQUEST_ID_HEADER, request_id)
		return response

	async def _observe(self, request: Request, call_next: RequestResponseEndpoint, request_id: str) -> Response:
		token = obs_logging.bind_context(
			request_id=request_id,
			route=request.url.path,
			user_id=request.headers.get("X-User-Id"),
		)
		started = time.perf_counter()
		status_code = 500
		try:
			response = await call_next(request)
			status_code = response.status_code
			return response
		except Exception:
			self._logger.exception("http_request_error", extra={"method": request.method})
			raise
		finally:
			elapsed = time.perf_counter() - started
			template = _route_template(request)
			metrics.observe_request(template, request.method, status_code, elapsed)
			self._logger.info(
				"http_request",
				extra={
					"method": request.method,
					"status": status_code,
					"route_template": template,
					"latency_ms": round(elapsed * 1000, 3),
				},
			)
			obs_logging.reset_context(token)


def install(app: FastAPI, *, enabled: bool = True) -> None:
	app.add_middleware(ObservabilityMiddleware, enabled=enabled)
