"""Domain models for conversations and messages."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Tuple

CONTENT_MAX_LENGTH = 4000
GROUP_MIN_OTHERS = 2
GROUP_NAME_MAX_LENGTH = 100


@dataclass(frozen=True, slots=True)
class ConversationKey:
	"""Canonical representation of a 1:1 conversation's participants."""

	user_a: str
	user_b: str

	@classmethod
	def from_participants(cls, user_one: str, user_two: str) -> "ConversationKey":
		ordered = tuple(sorted((str(user_one), str(user_two))))
		return cls(user_a=ordered[0], user_b=ordered[1])

	def participants(self) -> Tuple[str, str]:
		return (self.user_a, self.user_b)


@dataclass(slots=True)
class Conversation:
	id: str
	is_group: bool
	member_ids: Tuple[str, ...]
	created_at: datetime
	updated_at: datetime
	participant_a: Optional[str] = None
	participant_b: Optional[str] = None
	group_name: Optional[str] = None
	created_by: Optional[str] = None

	@property
	def kind(self) -> str:
		return "group" if self.is_group else "direct"

	def is_member(self, user_id: str) -> bool:
		return str(user_id) in self.member_ids

	def others(self, viewer_id: str) -> Tuple[str, ...]:
		return tuple(uid for uid in self.member_ids if uid != str(viewer_id))

	@classmethod
	def from_record(cls, record: Mapping[str, Any]) -> "Conversation":
		members = record.get("member_ids") or ()
		return cls(
			id=str(record["id"]),
			is_group=bool(record["is_group"]),
			member_ids=tuple(sorted(str(uid) for uid in members)),
			created_at=record["created_at"],
			updated_at=record["updated_at"],
			participant_a=str(record["participant_a"]) if record.get("participant_a") else None,
			participant_b=str(record["participant_b"]) if record.get("participant_b") else None,
			group_name=record.get("group_name"),
			created_by=str(record["created_by"]) if record.get("created_by") else None,
		)


@dataclass(slots=True)
class Message:
	id: str
	conversation_id: str
	sender_id: str
	content: str
	created_at: datetime
	read_at: Optional[datetime] = None

	def is_unread_for(self, viewer_id: str) -> bool:
		return self.sender_id != str(viewer_id) and self.read_at is None

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"conversation_id": self.conversation_id,
			"sender_id": self.sender_id,
			"content": self.content,
			"created_at": self.created_at.isoformat(),
			"read_at": self.read_at.isoformat() if self.read_at else None,
		}

	@classmethod
	def from_record(cls, record: Mapping[str, Any]) -> "Message":
		return cls(
			id=str(record["id"]),
			conversation_id=str(record["conversation_id"]),
			sender_id=str(record["sender_id"]),
			content=record["content"],
			created_at=record["created_at"],
			read_at=record.get("read_at"),
		)
