"""Storage for conversations, memberships and messages."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol, Sequence, Tuple
from uuid import uuid4

import asyncpg
import ulid

from app.domain.chat.models import Conversation, ConversationKey, Message
from app.infra.postgres import get_pool

_CONVERSATION_SELECT = """
SELECT c.id, c.is_group, c.participant_a, c.participant_b, c.group_name, c.created_by,
	c.created_at, c.updated_at,
	ARRAY(SELECT m.user_id FROM conversation_members m WHERE m.conversation_id = c.id) AS member_ids
FROM conversations c
"""

_MESSAGE_COLUMNS = "id, conversation_id, sender_id, content, created_at, read_at"


class ChatRepository(Protocol):
	async def get_or_create_direct(self, key: ConversationKey, created_by: str) -> Tuple[Conversation, bool]:
		"""Return the direct conversation for ``key`` and whether it was just created."""

	async def create_group(self, created_by: str, member_ids: Sequence[str], name: Optional[str]) -> Conversation:
		...

	async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
		...

	async def list_conversations(self, user_id: str) -> List[Conversation]:
		...

	async def create_message(self, conversation_id: str, sender_id: str, content: str) -> Message:
		...

	async def get_message(self, message_id: str) -> Optional[Message]:
		...

	async def list_messages(self, conversation_id: str, *, limit: int) -> List[Message]:
		...

	async def last_message(self, conversation_id: str) -> Optional[Message]:
		...

	async def count_unread(self, conversation_id: str, viewer_id: str) -> int:
		...

	async def mark_read(self, conversation_id: str, viewer_id: str) -> int:
		...


class PostgresChatRepository:
	def __init__(self, pool: asyncpg.Pool | None = None) -> None:
		self._pool = pool

	async def _acquire_pool(self) -> asyncpg.Pool:
		return self._pool or await get_pool()

	@staticmethod
	async def _fetch_conversation(conn: asyncpg.Connection, conversation_id: str) -> Optional[Conversation]:
		row = await conn.fetchrow(_CONVERSATION_SELECT + "WHERE c.id = $1", conversation_id)
		return Conversation.from_record(row) if row else None

	async def get_or_create_direct(self, key: ConversationKey, created_by: str) -> Tuple[Conversation, bool]:
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				conversation_id = await conn.fetchval(
					"""
					INSERT INTO conversations (id, is_group, participant_a, participant_b, created_by)
					VALUES ($1, FALSE, $2, $3, $4)
					ON CONFLICT (participant_a, participant_b) WHERE NOT is_group DO NOTHING
					RETURNING id
					""",
					uuid4(),
					key.user_a,
					key.user_b,
					created_by,
				)
				created = conversation_id is not None
				if created:
					await conn.executemany(
						"""
						INSERT INTO conversation_members (conversation_id, user_id)
						VALUES ($1, $2)
						ON CONFLICT DO NOTHING
						""",
						[(conversation_id, uid) for uid in key.participants()],
					)
				else:
					conversation_id = await conn.fetchval(
						"""
						SELECT id FROM conversations
						WHERE NOT is_group AND participant_a = $1 AND participant_b = $2
						""",
						key.user_a,
						key.user_b,
					)
			conversation = await self._fetch_conversation(conn, str(conversation_id))
		return conversation, created

	async def create_group(self, created_by: str, member_ids: Sequence[str], name: Optional[str]) -> Conversation:
		conversation_id = uuid4()
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				await conn.execute(
					"""
					INSERT INTO conversations (id, is_group, group_name, created_by)
					VALUES ($1, TRUE, $2, $3)
					""",
					conversation_id,
					name,
					created_by,
				)
				await conn.executemany(
					"INSERT INTO conversation_members (conversation_id, user_id) VALUES ($1, $2)",
					[(conversation_id, uid) for uid in member_ids],
				)
			return await self._fetch_conversation(conn, str(conversation_id))

	async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			return await self._fetch_conversation(conn, str(conversation_id))

	async def list_conversations(self, user_id: str) -> List[Conversation]:
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				_CONVERSATION_SELECT
				+ """
				WHERE c.id IN (SELECT conversation_id FROM conversation_members WHERE user_id = $1)
				ORDER BY c.updated_at DESC
				""",
				user_id,
			)
		return [Conversation.from_record(row) for row in rows]

	async def create_message(self, conversation_id: str, sender_id: str, content: str) -> Message:
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				row = await conn.fetchrow(
					f"""
					INSERT INTO messages (id, conversation_id, sender_id, content)
					VALUES ($1, $2, $3, $4)
					RETURNING {_MESSAGE_COLUMNS}
					""",
					str(ulid.new()),
					conversation_id,
					sender_id,
					content,
				)
				await conn.execute(
					"UPDATE conversations SET updated_at = $2 WHERE id = $1",
					conversation_id,
					row["created_at"],
				)
		return Message.from_record(row)

	async def get_message(self, message_id: str) -> Optional[Message]:
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(f"SELECT {_MESSAGE_COLUMNS} FROM messages WHERE id = $1", message_id)
		return Message.from_record(row) if row else None

	async def list_messages(self, conversation_id: str, *, limit: int) -> List[Message]:
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				f"""
				SELECT * FROM (
					SELECT {_MESSAGE_COLUMNS}
					FROM messages
					WHERE conversation_id = $1
					ORDER BY created_at DESC, id DESC
					LIMIT $2
				) recent
				ORDER BY created_at ASC, id ASC
				""",
				conversation_id,
				limit,
			)
		return [Message.from_record(row) for row in rows]

	async def last_message(self, conversation_id: str) -> Optional[Message]:
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(
				f"""
				SELECT {_MESSAGE_COLUMNS}
				FROM messages
				WHERE conversation_id = $1
				ORDER BY created_at DESC, id DESC
				LIMIT 1
				""",
				conversation_id,
			)
		return Message.from_record(row) if row else None

	async def count_unread(self, conversation_id: str, viewer_id: str) -> int:
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			count = await conn.fetchval(
				"""
				SELECT COUNT(*) FROM messages
				WHERE conversation_id = $1 AND sender_id <> $2 AND read_at IS NULL
				""",
				conversation_id,
				viewer_id,
			)
		return int(count or 0)

	async def mark_read(self, conversation_id: str, viewer_id: str) -> int:
		pool = await self._acquire_pool()
		async with pool.acquire() as conn:
			status = await conn.execute(
				"""
				UPDATE messages SET read_at = NOW()
				WHERE conversation_id = $1 AND sender_id <> $2 AND read_at IS NULL
				""",
				conversation_id,
				viewer_id,
			)
		# asyncpg returns the command tag, e.g. "UPDATE 3"
		return int(status.split()[-1]) if status else 0


class InMemoryChatRepository:
	"""Process-local chat store for tests."""

	def __init__(self) -> None:
		self._lock = asyncio.Lock()
		self._conversations: Dict[str, Conversation] = {}
		self._direct: Dict[ConversationKey, str] = {}
		self._messages: Dict[str, List[Message]] = {}

	@staticmethod
	def _now() -> datetime:
		return datetime.now(timezone.utc)

	async def get_or_create_direct(self, key: ConversationKey, created_by: str) -> Tuple[Conversation, bool]:
		async with self._lock:
			existing = self._direct.get(key)
			if existing is not None:
				return self._conversations[existing], False
			now = self._now()
			conversation = Conversation(
				id=str(uuid4()),
				is_group=False,
				member_ids=key.participants(),
				created_at=now,
				updated_at=now,
				participant_a=key.user_a,
				participant_b=key.user_b,
				created_by=created_by,
			)
			self._conversations[conversation.id] = conversation
			self._direct[key] = conversation.id
			self._messages[conversation.id] = []
			return conversation, True

	async def create_group(self, created_by: str, member_ids: Sequence[str], name: Optional[str]) -> Conversation:
		now = self._now()
		conversation = Conversation(
			id=str(uuid4()),
			is_group=True,
			member_ids=tuple(sorted(member_ids)),
			created_at=now,
			updated_at=now,
			group_name=name,
			created_by=created_by,
		)
		async with self._lock:
			self._conversations[conversation.id] = conversation
			self._messages[conversation.id] = []
		return conversation

	async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
		async with self._lock:
			return self._conversations.get(str(conversation_id))

	async def list_conversations(self, user_id: str) -> List[Conversation]:
		async with self._lock:
			rows = [c for c in self._conversations.values() if c.is_member(user_id)]
		rows.sort(key=lambda c: c.updated_at, reverse=True)
		return rows

	async def create_message(self, conversation_id: str, sender_id: str, content: str) -> Message:
		async with self._lock:
			message = Message(
				id=str(ulid.new()),
				conversation_id=conversation_id,
				sender_id=sender_id,
				content=content,
				created_at=self._now(),
			)
			self._messages.setdefault(conversation_id, []).append(message)
			conversation = self._conversations[conversation_id]
			self._conversations[conversation_id] = replace(conversation, updated_at=message.created_at)
			return replace(message)

	async def get_message(self, message_id: str) -> Optional[Message]:
		async with self._lock:
			for messages in self._messages.values():
				for message in messages:
					if message.id == message_id:
						return replace(message)
			return None

	async def list_messages(self, conversation_id: str, *, limit: int) -> List[Message]:
		async with self._lock:
			return [replace(m) for m in self._messages.get(conversation_id, [])[-limit:]]

	async def last_message(self, conversation_id: str) -> Optional[Message]:
		async with self._lock:
			messages = self._messages.get(conversation_id) or []
			return replace(messages[-1]) if messages else None

	async def count_unread(self, conversation_id: str, viewer_id: str) -> int:
		async with self._lock:
			return sum(1 for m in self._messages.get(conversation_id, []) if m.is_unread_for(viewer_id))

	async def mark_read(self, conversation_id: str, viewer_id: str) -> int:
		now = self._now()
		updated = 0
		async with self._lock:
			for message in self._messages.get(conversation_id, []):
				if message.is_unread_for(viewer_id):
					message.read_at = now
					updated += 1
		return updated
