"""Pydantic schemas for friend requests and friendships."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.domain.profiles.schemas import ProfileOut
from app.domain.social.models import NOTE_MAX_LENGTH, FriendRequest, RelationshipState


class SendRequestPayload(BaseModel):
	to_user_id: UUID = Field(..., description="Recipient of the friend request")
	note: Optional[str] = Field(default=None, max_length=NOTE_MAX_LENGTH)

	@field_validator("note", mode="before")
	@classmethod
	def _blank_note(cls, value):
		if isinstance(value, str):
			value = value.strip()
			return value or None
		return value


class FriendRequestOut(BaseModel):
	id: UUID
	from_user_id: UUID
	to_user_id: UUID
	status: Literal["pending", "accepted", "declined", "canceled"]
	note: Optional[str] = None
	created_at: datetime
	responded_at: Optional[datetime] = None

	@classmethod
	def from_request(cls, request: FriendRequest) -> "FriendRequestOut":
		return cls(
			id=request.id,
			from_user_id=request.from_user,
			to_user_id=request.to_user,
			status=request.status.value,
			note=request.note,
			created_at=request.created_at,
			responded_at=request.responded_at,
		)


class FriendRequestSummary(BaseModel):
	request: FriendRequestOut
	counterpart: Optional[ProfileOut] = None


class RequestOutcome(BaseModel):
	request: FriendRequestOut
	relationship: RelationshipState


class RelationshipOut(BaseModel):
	user_id: UUID
	relationship: RelationshipState
	request_id: Optional[UUID] = None


class RequestUpdatePayload(BaseModel):
	id: UUID
	status: Literal["pending", "accepted", "declined", "canceled"]


class FriendUpdatePayload(BaseModel):
	user_id: UUID
	friend_id: UUID
	status: Literal["accepted"] = "accepted"
