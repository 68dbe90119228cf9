"""Policy helpers and guard checks for friend requests."""

from __future__ import annotations

from datetime import datetime, timezone

from app.domain.social.exceptions import (
	FriendRequestRateLimitExceeded,
	RequestForbidden,
	RequestGone,
	SelfRequest,
)
from app.domain.social.models import FriendRequest
from app.infra.rate_limit import touch_limit
from app.settings import settings


async def enforce_request_limits(user_id: str) -> None:
	now = datetime.now(timezone.utc)
	per_min_bucket = now.strftime("%Y%m%d%H%M")
	per_min_key = f"rl:friend_request:send:{user_id}:{per_min_bucket}"
	if await touch_limit(per_min_key, 60) > settings.friend_request_per_minute:
		raise FriendRequestRateLimitExceeded("per_minute")

	per_day_bucket = now.strftime("%Y%m%d")
	per_day_key = f"rl:friend_request:daily:{user_id}:{per_day_bucket}"
	if await touch_limit(per_day_key, 86_400) > settings.friend_request_per_day:
		raise FriendRequestRateLimitExceeded("per_day")


def guard_not_self(user_id: str, target_id: str) -> None:
	if str(user_id) == str(target_id):
		raise SelfRequest()


def ensure_recipient(request: FriendRequest, user_id: str) -> None:
	if request.to_user != str(user_id):
		raise RequestForbidden("not_recipient")


def ensure_sender(request: FriendRequest, user_id: str) -> None:
	if request.from_user != str(user_id):
		raise RequestForbidden("not_sender")


def ensure_pending(request: FriendRequest) -> None:
	if request.status.is_terminal:
		raise RequestGone()
