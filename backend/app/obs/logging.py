"""JSON logging for the API and background workers.

Every record carries the service identity plus whatever request context the
observability middleware bound for the current task. Free-text user content
(messages, notes, bios) and credentials never reach the log stream.
"""

from __future__ import annotations

import json
import logging
import random
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from app.settings import settings

REQUEST_ID_ATTR = "request_id"

_LOGGER_NAME = "campus_connect"
_CONTEXT_FIELDS = (REQUEST_ID_ATTR, "route", "user_id")
_EMPTY: Mapping[str, str] = MappingProxyType({})
_context: ContextVar[Mapping[str, str]] = ContextVar("campus_log_context", default=_EMPTY)

_REDACTED_KEYS = frozenset({"content", "note", "bio", "email", "password", "token", "authorization"})
_REDACTED_SUFFIXES = ("_token", "_secret")
_MAX_TEXT = 256
_MAX_ITEMS = 10

# Attributes every LogRecord has; anything else on the record came from ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def bind_context(**fields: Optional[str]) -> Token:
	"""Layer ``fields`` over the current log context; pass the token to ``reset_context``."""
	merged = dict(_context.get())
	merged.update({key: str(value) for key, value in fields.items() if key in _CONTEXT_FIELDS and value})
	return _context.set(MappingProxyType(merged))


def reset_context(token: Token) -> None:
	_context.reset(token)


def current_request_id() -> Optional[str]:
	return _context.get().get(REQUEST_ID_ATTR)


def _is_redacted(key: str) -> bool:
	lowered = key.lower()
	return lowered in _REDACTED_KEYS or lowered.endswith(_REDACTED_SUFFIXES)


def _clip(value: Any) -> Any:
	if isinstance(value, str):
		return value if len(value) <= _MAX_TEXT else value[:_MAX_TEXT] + "..."
	if isinstance(value, Mapping):
		clipped = {str(k): ("[redacted]" if _is_redacted(str(k)) else _clip(v)) for k, v in list(value.items())[:_MAX_ITEMS]}
		if len(value) > _MAX_ITEMS:
			clipped["..."] = f"+{len(value) - _MAX_ITEMS} keys"
		return clipped
	if isinstance(value, (list, tuple, set, frozenset)):
		items = [_clip(item) for item in list(value)[:_MAX_ITEMS]]
		if len(value) > _MAX_ITEMS:
			items.append(f"+{len(value) - _MAX_ITEMS} more")
		return items
	return value


class JSONLogFormatter(logging.Formatter):
	def format(self, record: logging.LogRecord) -> str:  # noqa: A003
		payload: Dict[str, Any] = {
			"ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
			"level": record.levelname.lower(),
			"logger": record.name,
			"msg": record.getMessage(),
			"service": settings.service_name,
			"env": settings.environment,
			"commit": settings.git_commit,
		}
		payload.update(_context.get())
		for key, value in vars(record).items():
			if key in _RECORD_ATTRS or key in payload:
				continue
			payload[key] = "[redacted]" if _is_redacted(key) else _clip(value)
		if record.exc_info:
			payload["exc_info"] = self.formatException(record.exc_info)
		return json.dumps(payload, separators=(",", ":"), default=str)


class InfoSamplingFilter(logging.Filter):
	"""Drop a share of INFO records; everything else always passes."""

	def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
		if record.levelno != logging.INFO:
			return True
		rate = settings.obs_log_sampling_rate_info
		return rate >= 1.0 or random.random() < max(rate, 0.0)


def configure_logging() -> logging.Logger:
	handler = logging.StreamHandler()
	handler.setFormatter(JSONLogFormatter())
	handler.addFilter(InfoSamplingFilter())
	root = logging.getLogger()
	root.handlers[:] = [handler]
	root.setLevel(settings.obs_log_level.upper())
	return logging.getLogger(_LOGGER_NAME)


def get_logger(name: Optional[str] = None) -> logging.Logger:
	return logging.getLogger(name or _LOGGER_NAME)
