"""Observability package bootstrap."""

from __future__ import annotations

from fastapi import FastAPI

from app.obs import logging as obs_logging
from app.obs import middleware
from app.settings import settings

_logging_configured = False


def init(app: FastAPI) -> None:
	"""Install request middleware on ``app`` and configure JSON logging once per process."""
	global _logging_configured
	if settings.obs_enabled and not _logging_configured:
		obs_logging.configure_logging()
		_logging_configured = True
	middleware.install(app)


__all__ = ["init"]
