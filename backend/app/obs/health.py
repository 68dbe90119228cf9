"""Liveness and readiness probes."""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Any, Awaitable, Callable, Dict, Tuple

from app.infra import postgres
from app.infra.redis import redis_client
from app.obs import metrics

LOGGER = logging.getLogger(__name__)


async def _ping_postgres() -> None:
	pool = await postgres.get_pool()
	async with pool.acquire() as conn:
		await conn.execute("SELECT 1")


async def _ping_redis() -> None:
	await redis_client.ping()


PROBES: Dict[str, Tuple[Callable[[], Awaitable[None]], float]] = {
	"postgres": (_ping_postgres, 0.3),
	"redis": (_ping_redis, 0.2),
}


async def _probe(store: str, check: Callable[[], Awaitable[None]], timeout: float) -> Dict[str, Any]:
	started = perf_counter()
	try:
		await asyncio.wait_for(check(), timeout=timeout)
	except Exception as exc:
		metrics.mark_store(store, False)
		LOGGER.warning("readiness probe failed", extra={"store": store}, exc_info=True)
		return {"ok": False, "error": type(exc).__name__}
	metrics.mark_store(store, True)
	return {"ok": True, "latency_ms": round((perf_counter() - started) * 1000, 2)}


async def liveness() -> Dict[str, Any]:
	return {"status": "ok"}


async def readiness() -> Tuple[int, Dict[str, Any]]:
	names = list(PROBES)
	results = await asyncio.gather(*(_probe(name, *PROBES[name]) for name in names))
	checks = dict(zip(names, results))
	ok = all(result["ok"] for result in results)
	return (200 if ok else 503), {"status": "ok" if ok else "degraded", "checks": checks}
