"""Audit helpers for friend requests and friendships."""

from __future__ import annotations

from typing import Dict

from app.domain.social.models import FriendRequest
from app.infra.redis import redis_client
from app.obs import metrics as obs_metrics

REQUEST_EVENTS_STREAM = "x:friend_requests.events"
FRIENDSHIP_EVENTS_STREAM = "x:friendships.events"


async def log_request_event(event: str, request: FriendRequest) -> None:
	payload: Dict[str, str] = {
		"event": event,
		"request_id": request.id,
		"from": request.from_user,
		"to": request.to_user,
		"status": request.status.value,
	}
	await redis_client.xadd(REQUEST_EVENTS_STREAM, payload)


async def log_friend_event(event: str, user_a: str, user_b: str) -> None:
	await redis_client.xadd(FRIENDSHIP_EVENTS_STREAM, {"event": event, "user_a": user_a, "user_b": user_b})


def inc_request_sent(result: str) -> None:
	obs_metrics.inc_friend_request_sent(result)


def inc_send_reject(reason: str) -> None:
	obs_metrics.inc_friend_request_reject(reason)


def inc_transition(status: str) -> None:
	obs_metrics.inc_friend_request_transition(status)


def inc_notify_failure(event: str) -> None:
	obs_metrics.inc_friend_request_notify_failure(event)
