"""Domain models for friend requests and friendships."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

NOTE_MAX_LENGTH = 200


class FriendRequestStatus(str, Enum):
	"""Lifecycle of a directional friend request."""

	PENDING = "pending"
	ACCEPTED = "accepted"
	DECLINED = "declined"
	CANCELED = "canceled"

	@property
	def is_terminal(self) -> bool:
		return self is not FriendRequestStatus.PENDING


class RelationshipState(str, Enum):
	"""Viewer-relative relationship towards another user."""

	NONE = "none"
	FRIENDS = "friends"
	REQUEST_SENT = "request_sent"
	REQUEST_RECEIVED = "request_received"


@dataclass(slots=True)
class FriendRequest:
	id: str
	from_user: str
	to_user: str
	status: FriendRequestStatus
	created_at: datetime
	note: Optional[str] = None
	responded_at: Optional[datetime] = None

	@property
	def pair(self) -> Tuple[str, str]:
		return canonical_pair(self.from_user, self.to_user)

	def involves(self, user_id: str) -> bool:
		return str(user_id) in (self.from_user, self.to_user)

	@classmethod
	def from_record(cls, record: Mapping[str, Any]) -> "FriendRequest":
		return cls(
			id=str(record["id"]),
			from_user=str(record["from_user"]),
			to_user=str(record["to_user"]),
			status=FriendRequestStatus(record["status"]),
			created_at=record["created_at"],
			note=record.get("note"),
			responded_at=record.get("responded_at"),
		)


@dataclass(frozen=True, slots=True)
class Friendship:
	"""Undirected friendship stored once with ``user_a < user_b``."""

	user_a: str
	user_b: str
	created_at: Optional[datetime] = None

	def other(self, user_id: str) -> Optional[str]:
		user_id = str(user_id)
		if user_id == self.user_a:
			return self.user_b
		if user_id == self.user_b:
			return self.user_a
		return None

	@classmethod
	def between(cls, first: str, second: str, created_at: Optional[datetime] = None) -> "Friendship":
		user_a, user_b = canonical_pair(first, second)
		return cls(user_a=user_a, user_b=user_b, created_at=created_at)

	@classmethod
	def from_record(cls, record: Mapping[str, Any]) -> "Friendship":
		return cls(
			user_a=str(record["user_a"]),
			user_b=str(record["user_b"]),
			created_at=record.get("created_at"),
		)


def canonical_pair(first: str, second: str) -> Tuple[str, str]:
	first, second = str(first), str(second)
	return (first, second) if first < second else (second, first)
