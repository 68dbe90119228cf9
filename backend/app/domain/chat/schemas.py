"""Pydantic schemas for the conversations API."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.domain.profiles.schemas import ProfileOut
from .models import CONTENT_MAX_LENGTH, GROUP_NAME_MAX_LENGTH, Message


class DirectConversationRequest(BaseModel):
	user_id: UUID = Field(..., description="The other participant")


class GroupConversationRequest(BaseModel):
	member_ids: List[UUID] = Field(..., min_length=1, max_length=50)
	name: Optional[str] = Field(default=None, max_length=GROUP_NAME_MAX_LENGTH)

	@field_validator("name", mode="before")
	@classmethod
	def _blank_name(cls, value):
		if isinstance(value, str):
			value = value.strip()
			return value or None
		return value


class SendMessageRequest(BaseModel):
	content: str = Field(..., min_length=1, max_length=CONTENT_MAX_LENGTH)

	@field_validator("content", mode="before")
	@classmethod
	def _strip(cls, value):
		return value.strip() if isinstance(value, str) else value


class MessageOut(BaseModel):
	id: str = Field(..., examples=["01HZY5AJ6HT7PM1F8M3X2W8Z9V"])
	conversation_id: str
	sender_id: str
	content: str
	created_at: datetime
	read_at: Optional[datetime] = None

	@classmethod
	def from_message(cls, message: Message) -> "MessageOut":
		return cls(
			id=message.id,
			conversation_id=message.conversation_id,
			sender_id=message.sender_id,
			content=message.content,
			created_at=message.created_at,
			read_at=message.read_at,
		)


class ConversationSummary(BaseModel):
	id: str
	is_group: bool
	display_name: str
	avatar_url: Optional[str] = None
	participants: List[ProfileOut] = Field(default_factory=list)
	last_message: Optional[MessageOut] = None
	unread_count: int = 0
	updated_at: datetime


class ConversationCreated(BaseModel):
	conversation: ConversationSummary
	created: bool


class MessageListResponse(BaseModel):
	conversation: ConversationSummary
	items: List[MessageOut]


class MarkReadResponse(BaseModel):
	conversation_id: str
	marked: int
