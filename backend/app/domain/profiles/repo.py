"""Profile persistence: asyncpg repository plus an in-memory twin for tests."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Protocol, Sequence, Set

import asyncpg

from app.domain.profiles.models import Profile
from app.infra.postgres import get_pool

_PROFILE_COLUMNS = (
	"id, email, full_name, username, pronouns, major, year, bio, interests, looking_for, "
	"campus_area, avatar_url, created_at, updated_at"
)


class ProfileRepository(Protocol):
	async def get_profile(self, user_id: str) -> Optional[Profile]:
		...

	async def get_profiles(self, user_ids: Sequence[str]) -> List[Profile]:
		...

	async def list_candidates(self, viewer_id: str, *, limit: int) -> List[Profile]:
		...

	async def existing_ids(self, user_ids: Iterable[str]) -> Set[str]:
		...

	async def upsert_profile(self, profile: Profile) -> Profile:
		...


class PostgresProfileRepository:
	def __init__(self, pool: asyncpg.Pool | None = None) -> None:
		self._pool = pool

	async def _acquire_pool(self) -> asyncpg.Pool:
		return self._pool or await get_pool()

	async def get_profile(self, user_id: str) -> Optional[Profile]:
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(f"SELECT {_PROFILE_COLUMNS} FROM profiles WHERE id = $1", user_id)
		return Profile.from_record(row) if row else None

	async def get_profiles(self, user_ids: Sequence[str]) -> List[Profile]:
		unique_ids = list(dict.fromkeys(str(uid) for uid in user_ids))
		if not unique_ids:
			return []
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				f"SELECT {_PROFILE_COLUMNS} FROM profiles WHERE id = ANY($1::uuid[])",
				unique_ids,
			)
		by_id = {str(row["id"]): Profile.from_record(row) for row in rows}
		return [by_id[uid] for uid in unique_ids if uid in by_id]

	async def list_candidates(self, viewer_id: str, *, limit: int) -> List[Profile]:
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				f"""
				SELECT {_PROFILE_COLUMNS}
				FROM profiles
				WHERE id <> $1
				ORDER BY updated_at DESC
				LIMIT $2
				""",
				viewer_id,
				limit,
			)
		return [Profile.from_record(row) for row in rows]

	async def existing_ids(self, user_ids: Iterable[str]) -> Set[str]:
		unique_ids = list({str(uid) for uid in user_ids})
		if not unique_ids:
			return set()
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch("SELECT id FROM profiles WHERE id = ANY($1::uuid[])", unique_ids)
		return {str(row["id"]) for row in rows}

	async def upsert_profile(self, profile: Profile) -> Profile:
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				f"""
				INSERT INTO profiles (
					id, email, full_name, username, pronouns, major, year, bio,
					interests, looking_for, campus_area, avatar_url
				)
				VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12)
				ON CONFLICT (id) DO UPDATE SET
					email = COALESCE(EXCLUDED.email, profiles.email),
					full_name = EXCLUDED.full_name,
					username = EXCLUDED.username,
					pronouns = EXCLUDED.pronouns,
					major = EXCLUDED.major,
					year = EXCLUDED.year,
					bio = EXCLUDED.bio,
					interests = EXCLUDED.interests,
					looking_for = EXCLUDED.looking_for,
					campus_area = EXCLUDED.campus_area,
					avatar_url = EXCLUDED.avatar_url,
					updated_at = NOW()
				RETURNING {_PROFILE_COLUMNS}
				""",
				profile.id,
				profile.email,
				profile.full_name,
				profile.username,
				profile.pronouns,
				profile.major,
				profile.year,
				profile.bio,
				list(profile.interests),
				list(profile.looking_for),
				profile.campus_area,
				profile.avatar_url,
			)
		return Profile.from_record(row)


class InMemoryProfileRepository:
	"""Dictionary-backed repository used by tests and local tooling."""

	def __init__(self, profiles: Iterable[Profile] = ()) -> None:
		self._lock = asyncio.Lock()
		self._profiles: dict[str, Profile] = {}
		for profile in profiles:
			self._profiles[profile.id] = profile

	async def get_profile(self, user_id: str) -> Optional[Profile]:
		async with self._lock:
			return self._profiles.get(str(user_id))

	async def get_profiles(self, user_ids: Sequence[str]) -> List[Profile]:
		async with self._lock:
			ordered = dict.fromkeys(str(uid) for uid in user_ids)
			return [self._profiles[uid] for uid in ordered if uid in self._profiles]

	async def list_candidates(self, viewer_id: str, *, limit: int) -> List[Profile]:
		async with self._lock:
			candidates = [p for p in self._profiles.values() if p.id != str(viewer_id)]
		epoch = datetime.min.replace(tzinfo=timezone.utc)
		candidates.sort(key=lambda p: p.updated_at or epoch, reverse=True)
		return candidates[:limit]

	async def existing_ids(self, user_ids: Iterable[str]) -> Set[str]:
		async with self._lock:
			return {str(uid) for uid in user_ids if str(uid) in self._profiles}

	async def upsert_profile(self, profile: Profile) -> Profile:
		now = datetime.now(timezone.utc)
		async with self._lock:
			existing = self._profiles.get(profile.id)
			stored = replace(
				profile,
				email=profile.email or (existing.email if existing else None),
				created_at=existing.created_at if existing else now,
				updated_at=now,
			)
			self._profiles[profile.id] = stored
			return stored
