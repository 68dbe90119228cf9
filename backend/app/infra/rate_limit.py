"""Simple Redis-backed rate limiting utilities."""

from __future__ import annotations

from app.infra.redis import redis_client


async def touch_limit(key: str, ttl_seconds: int) -> int:
	"""Increment a fixed-window counter and return the new count."""
	async with redis_client.pipeline(transaction=True) as pipe:
		pipe.incr(key)
		pipe.expire(key, ttl_seconds)
		count, _ = await pipe.execute()
	return int(count)


class RateLimitExceeded(Exception):
	"""Raised when the rate limit has been hit."""
