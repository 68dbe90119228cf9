from datetime import datetime, timezone

import pytest

from app.domain.social import policy
from app.domain.social.exceptions import FriendRequestRateLimitExceeded, RequestGone, SelfRequest
from app.domain.social.models import FriendRequest, FriendRequestStatus
from app.settings import settings


@pytest.mark.asyncio
async def test_per_minute_quota(monkeypatch):
	monkeypatch.setattr(settings, "friend_request_per_minute", 2)

	await policy.enforce_request_limits("alice")
	await policy.enforce_request_limits("alice")
	with pytest.raises(FriendRequestRateLimitExceeded) as exc:
		await policy.enforce_request_limits("alice")

	assert exc.value.reason == "per_minute"


@pytest.mark.asyncio
async def test_daily_quota(monkeypatch):
	monkeypatch.setattr(settings, "friend_request_per_minute", 100)
	monkeypatch.setattr(settings, "friend_request_per_day", 1)

	await policy.enforce_request_limits("alice")
	with pytest.raises(FriendRequestRateLimitExceeded) as exc:
		await policy.enforce_request_limits("alice")

	assert exc.value.reason == "per_day"


@pytest.mark.asyncio
async def test_quotas_are_per_sender(monkeypatch, fake_redis):
	monkeypatch.setattr(settings, "friend_request_per_minute", 1)

	await policy.enforce_request_limits("alice")
	await policy.enforce_request_limits("bob")

	keys = await fake_redis.keys("rl:friend_request:send:*")
	assert len(keys) == 2
	ttls = [await fake_redis.ttl(key) for key in keys]
	assert all(ttl > 0 for ttl in ttls)


def test_guard_not_self_compares_as_strings():
	with pytest.raises(SelfRequest):
		policy.guard_not_self("42", 42)


@pytest.mark.parametrize("status", [s for s in FriendRequestStatus if s.is_terminal])
def test_only_pending_requests_can_transition(status):
	request = FriendRequest(
		id="r1",
		from_user="alice",
		to_user="bob",
		status=FriendRequestStatus.PENDING,
		created_at=datetime.now(timezone.utc),
	)
	policy.ensure_pending(request)

	request.status = status
	with pytest.raises(RequestGone):
		policy.ensure_pending(request)
