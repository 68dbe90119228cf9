"""Request id helpers for endpoints and error handlers.

The observability middleware stores the id on ``request.state`` and binds it
into the logging context.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from app.obs import logging as obs_logging

REQUEST_ID_ATTR = obs_logging.REQUEST_ID_ATTR


def get_request_id(request: Optional[Request] = None, default: str = "unknown") -> str:
    """Return the current request id, else ``default``."""
    if request is not None:
        rid = getattr(request.state, REQUEST_ID_ATTR, None)
        if rid:
            return str(rid)
    return obs_logging.current_request_id() or default
