"""Redis client shared by rate limits, audit streams and chat events.

Modules import ``redis_client`` once; tests swap the client underneath it with
``set_redis_client`` (fakeredis) and every importer sees the swap.
"""

from __future__ import annotations

import redis.asyncio as redis

from app.settings import settings


class RedisProxy:
	def __init__(self, client: redis.Redis) -> None:
		self._client = client

	@property
	def client(self) -> redis.Redis:
		return self._client

	def set_client(self, client: redis.Redis) -> None:
		self._client = client

	def __getattr__(self, item):
		return getattr(self._client, item)


def _from_settings() -> redis.Redis:
	# Connections open lazily on first command.
	return redis.from_url(settings.redis_url, decode_responses=True)


redis_client = RedisProxy(_from_settings())


def set_redis_client(client: redis.Redis) -> None:
	redis_client.set_client(client)


async def close_redis() -> None:
	await redis_client.client.aclose()
