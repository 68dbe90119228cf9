"""Storage for friend requests and friendships."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol, Set, Tuple
from uuid import uuid4

import asyncpg

from app.domain.social.models import (
	FriendRequest,
	FriendRequestStatus,
	Friendship,
	canonical_pair,
)
from app.infra.postgres import get_pool

_REQUEST_COLUMNS = "id, from_user, to_user, status, note, created_at, responded_at"


class SocialRepository(Protocol):
	async def get_request(self, request_id: str) -> Optional[FriendRequest]:
		...

	async def create_request(self, from_user: str, to_user: str, note: Optional[str]) -> Optional[FriendRequest]:
		"""Insert a pending request; ``None`` when one is already pending for the pair."""

	async def accept_request(self, request_id: str) -> Optional[FriendRequest]:
		"""Accept a pending request atomically; ``None`` when it is no longer pending."""

	async def close_request(self, request_id: str, status: FriendRequestStatus) -> Optional[FriendRequest]:
		"""Move a pending request to ``declined`` or ``canceled``; ``None`` when not pending."""

	async def list_friendships(self, user_id: str) -> List[Friendship]:
		...

	async def list_pending_for(self, user_id: str) -> List[FriendRequest]:
		...

	async def list_incoming(self, user_id: str) -> List[FriendRequest]:
		...

	async def list_outgoing(self, user_id: str) -> List[FriendRequest]:
		...

	async def are_friends(self, first: str, second: str) -> bool:
		...


class PostgresSocialRepository:
	def __init__(self, pool: asyncpg.Pool | None = None) -> None:
		self._pool = pool

	async def _acquire_pool(self) -> asyncpg.Pool:
		return self._pool or await get_pool()

	async def get_request(self, request_id: str) -> Optional[FriendRequest]:
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				f"SELECT {_REQUEST_COLUMNS} FROM friend_requests WHERE id = $1",
				str(request_id),
			)
		return FriendRequest.from_record(row) if row else None

	async def create_request(self, from_user: str, to_user: str, note: Optional[str]) -> Optional[FriendRequest]:
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				f"""
				INSERT INTO friend_requests (id, from_user, to_user, status, note)
				VALUES ($1, $2, $3, 'pending', $4)
				ON CONFLICT (from_user, to_user) WHERE status = 'pending' DO NOTHING
				RETURNING {_REQUEST_COLUMNS}
				""",
				uuid4(),
				from_user,
				to_user,
				note,
			)
		return FriendRequest.from_record(row) if row else None

	async def accept_request(self, request_id: str) -> Optional[FriendRequest]:
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				row = await conn.fetchrow(
					f"""
					UPDATE friend_requests
					SET status = 'accepted', responded_at = NOW()
					WHERE id = $1 AND status = 'pending'
					RETURNING {_REQUEST_COLUMNS}
					""",
					str(request_id),
				)
				if row is None:
					return None
				accepted = FriendRequest.from_record(row)
				user_a, user_b = accepted.pair
				await conn.execute(
					"""
					INSERT INTO friendships (user_a, user_b)
					VALUES ($1, $2)
					ON CONFLICT (user_a, user_b) DO NOTHING
					""",
					user_a,
					user_b,
				)
				await conn.execute(
					"""
					UPDATE friend_requests
					SET status = 'canceled'
					WHERE status = 'pending'
						AND id <> $1
						AND ((from_user = $2 AND to_user = $3) OR (from_user = $3 AND to_user = $2))
					""",
					str(request_id),
					user_a,
					user_b,
				)
		return accepted

	async def close_request(self, request_id: str, status: FriendRequestStatus) -> Optional[FriendRequest]:
		if status not in (FriendRequestStatus.DECLINED, FriendRequestStatus.CANCELED):
			raise ValueError(f"unsupported close status: {status}")
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				f"""
				UPDATE friend_requests
				SET status = $2,
					responded_at = CASE WHEN $2 = 'declined' THEN NOW() ELSE responded_at END
				WHERE id = $1 AND status = 'pending'
				RETURNING {_REQUEST_COLUMNS}
				""",
				str(request_id),
				status.value,
			)
		return FriendRequest.from_record(row) if row else None

	async def list_friendships(self, user_id: str) -> List[Friendship]:
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				"""
				SELECT user_a, user_b, created_at
				FROM friendships
				WHERE user_a = $1 OR user_b = $1
				""",
				user_id,
			)
		return [Friendship.from_record(row) for row in rows]

	async def list_pending_for(self, user_id: str) -> List[FriendRequest]:
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				f"""
				SELECT {_REQUEST_COLUMNS}
				FROM friend_requests
				WHERE status = 'pending' AND (from_user = $1 OR to_user = $1)
				ORDER BY created_at DESC
				""",
				user_id,
			)
		return [FriendRequest.from_record(row) for row in rows]

	async def _list_pending(self, column: str, user_id: str) -> List[FriendRequest]:
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				f"""
				SELECT {_REQUEST_COLUMNS}
				FROM friend_requests
				WHERE {column} = $1 AND status = 'pending'
				ORDER BY created_at DESC
				""",
				user_id,
			)
		return [FriendRequest.from_record(row) for row in rows]

	async def list_incoming(self, user_id: str) -> List[FriendRequest]:
		return await self._list_pending("to_user", user_id)

	async def list_outgoing(self, user_id: str) -> List[FriendRequest]:
		return await self._list_pending("from_user", user_id)

	async def are_friends(self, first: str, second: str) -> bool:
		user_a, user_b = canonical_pair(first, second)
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			found = await conn.fetchval(
				"SELECT 1 FROM friendships WHERE user_a = $1 AND user_b = $2",
				user_a,
				user_b,
			)
		return bool(found)


class InMemorySocialRepository:
	"""Process-local repository with the same atomicity guarantees, for tests."""

	def __init__(self) -> None:
		self._lock = asyncio.Lock()
		self._requests: Dict[str, FriendRequest] = {}
		self._friendships: Dict[Tuple[str, str], Friendship] = {}
		self._pending_pairs: Set[Tuple[str, str]] = set()

	@staticmethod
	def _now() -> datetime:
		return datetime.now(timezone.utc)

	async def get_request(self, request_id: str) -> Optional[FriendRequest]:
		async with self._lock:
			return self._requests.get(str(request_id))

	async def create_request(self, from_user: str, to_user: str, note: Optional[str]) -> Optional[FriendRequest]:
		key = (str(from_user), str(to_user))
		async with self._lock:
			if key in self._pending_pairs:
				return None
			request = FriendRequest(
				id=str(uuid4()),
				from_user=key[0],
				to_user=key[1],
				status=FriendRequestStatus.PENDING,
				created_at=self._now(),
				note=note,
			)
			self._requests[request.id] = request
			self._pending_pairs.add(key)
			return request

	def _close(self, request: FriendRequest, status: FriendRequestStatus, responded: bool) -> None:
		request.status = status
		if responded:
			request.responded_at = self._now()
		self._pending_pairs.discard((request.from_user, request.to_user))

	async def accept_request(self, request_id: str) -> Optional[FriendRequest]:
		async with self._lock:
			request = self._requests.get(str(request_id))
			if request is None or request.status is not FriendRequestStatus.PENDING:
				return None
			self._close(request, FriendRequestStatus.ACCEPTED, responded=True)
			pair = request.pair
			self._friendships.setdefault(pair, Friendship.between(*pair, created_at=self._now()))
			for other in self._requests.values():
				if other.id != request.id and other.status is FriendRequestStatus.PENDING and other.pair == pair:
					self._close(other, FriendRequestStatus.CANCELED, responded=False)
			return request

	async def close_request(self, request_id: str, status: FriendRequestStatus) -> Optional[FriendRequest]:
		if status not in (FriendRequestStatus.DECLINED, FriendRequestStatus.CANCELED):
			raise ValueError(f"unsupported close status: {status}")
		async with self._lock:
			request = self._requests.get(str(request_id))
			if request is None or request.status is not FriendRequestStatus.PENDING:
				return None
			self._close(request, status, responded=status is FriendRequestStatus.DECLINED)
			return request

	async def list_friendships(self, user_id: str) -> List[Friendship]:
		user_id = str(user_id)
		async with self._lock:
			return [f for f in self._friendships.values() if user_id in (f.user_a, f.user_b)]

	async def _pending(self, predicate) -> List[FriendRequest]:
		async with self._lock:
			rows = [
				r for r in self._requests.values()
				if r.status is FriendRequestStatus.PENDING and predicate(r)
			]
		rows.sort(key=lambda r: r.created_at, reverse=True)
		return rows

	async def list_pending_for(self, user_id: str) -> List[FriendRequest]:
		return await self._pending(lambda r: r.involves(user_id))

	async def list_incoming(self, user_id: str) -> List[FriendRequest]:
		return await self._pending(lambda r: r.to_user == str(user_id))

	async def list_outgoing(self, user_id: str) -> List[FriendRequest]:
		return await self._pending(lambda r: r.from_user == str(user_id))

	async def are_friends(self, first: str, second: str) -> bool:
		async with self._lock:
			return canonical_pair(first, second) in self._friendships

	def friendship_count(self) -> int:
		return len(self._friendships)
