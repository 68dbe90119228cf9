"""Conversation identity, membership and messaging."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence
from uuid import UUID

from redis.exceptions import RedisError

from app.domain.chat import events, naming
from app.domain.chat.exceptions import (
	ConversationNotFound,
	EmptyMessage,
	GroupTooSmall,
	MemberNotFound,
	NotAMember,
	SelfConversation,
)
from app.domain.chat.models import (
	CONTENT_MAX_LENGTH,
	GROUP_MIN_OTHERS,
	GROUP_NAME_MAX_LENGTH,
	Conversation,
	ConversationKey,
)
from app.domain.chat.repo import ChatRepository, PostgresChatRepository
from app.domain.chat.schemas import (
	ConversationCreated,
	ConversationSummary,
	MarkReadResponse,
	MessageListResponse,
	MessageOut,
)
from app.domain.profiles.exceptions import ProfileRequired
from app.domain.profiles.models import Profile
from app.domain.profiles.repo import PostgresProfileRepository, ProfileRepository
from app.domain.profiles.schemas import ProfileOut
from app.infra.auth import AuthenticatedUser
from app.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

MESSAGE_PAGE_LIMIT = 200


class ChatService:
	def __init__(
		self,
		repo: Optional[ChatRepository] = None,
		profiles: Optional[ProfileRepository] = None,
		*,
		publish_events: bool = True,
	) -> None:
		self._repo = repo or PostgresChatRepository()
		self._profiles = profiles or PostgresProfileRepository()
		self._publish_events = publish_events

	@property
	def repo(self) -> ChatRepository:
		return self._repo

	async def _ensure_profiles(self, actor_id: str, member_ids: Iterable[str]) -> None:
		wanted = set(member_ids) | {actor_id}
		existing = await self._profiles.existing_ids(wanted)
		if actor_id not in existing:
			raise ProfileRequired()
		if wanted - existing:
			raise MemberNotFound()

	async def _member_conversation(self, conversation_id: UUID | str, user_id: str) -> Conversation:
		conversation = await self._repo.get_conversation(str(conversation_id))
		if conversation is None:
			raise ConversationNotFound()
		if not conversation.is_member(user_id):
			raise NotAMember()
		return conversation

	async def is_member(self, conversation_id: str, user_id: str) -> bool:
		conversation = await self._repo.get_conversation(str(conversation_id))
		return conversation is not None and conversation.is_member(user_id)

	async def get_or_create_direct(self, auth_user: AuthenticatedUser, other_id: UUID | str) -> ConversationCreated:
		viewer_id = str(auth_user.id)
		other_id = str(other_id)
		if viewer_id == other_id:
			raise SelfConversation()
		await self._ensure_profiles(viewer_id, [other_id])

		key = ConversationKey.from_participants(viewer_id, other_id)
		conversation, created = await self._repo.get_or_create_direct(key, viewer_id)
		if created:
			obs_metrics.inc_conversation_created(conversation.kind)
			logger.info("direct conversation created", extra={"conversation_id": conversation.id})
		return ConversationCreated(conversation=await self.summarize(conversation, viewer_id), created=created)

	async def create_group(
		self,
		auth_user: AuthenticatedUser,
		member_ids: Sequence[UUID | str],
		name: Optional[str] = None,
	) -> ConversationCreated:
		creator_id = str(auth_user.id)
		others = [uid for uid in dict.fromkeys(str(m) for m in member_ids) if uid != creator_id]
		if len(others) < GROUP_MIN_OTHERS:
			raise GroupTooSmall()
		await self._ensure_profiles(creator_id, others)

		group_name = (name or "").strip()[:GROUP_NAME_MAX_LENGTH] or None
		conversation = await self._repo.create_group(creator_id, [creator_id, *others], group_name)
		obs_metrics.inc_conversation_created(conversation.kind)
		logger.info("group conversation created", extra={"conversation_id": conversation.id})
		return ConversationCreated(conversation=await self.summarize(conversation, creator_id), created=True)

	async def summarize(
		self,
		conversation: Conversation,
		viewer_id: str,
		profiles: Optional[Dict[str, Profile]] = None,
	) -> ConversationSummary:
		if profiles is None:
			profiles = {p.id: p for p in await self._profiles.get_profiles(conversation.member_ids)}
		others = [profiles[uid] for uid in conversation.others(viewer_id) if uid in profiles]
		last = await self._repo.last_message(conversation.id)
		return ConversationSummary(
			id=conversation.id,
			is_group=conversation.is_group,
			display_name=naming.display_name(conversation, viewer_id, profiles),
			avatar_url=None if conversation.is_group or not others else others[0].avatar_url,
			participants=[ProfileOut.from_profile(p) for p in others],
			last_message=MessageOut.from_message(last) if last else None,
			unread_count=await self._repo.count_unread(conversation.id, viewer_id),
			updated_at=conversation.updated_at,
		)

	async def list_conversations(self, auth_user: AuthenticatedUser) -> List[ConversationSummary]:
		viewer_id = str(auth_user.id)
		conversations = await self._repo.list_conversations(viewer_id)
		member_ids = {uid for conversation in conversations for uid in conversation.member_ids}
		profiles = {p.id: p for p in await self._profiles.get_profiles(sorted(member_ids))}
		return [await self.summarize(c, viewer_id, profiles) for c in conversations]

	async def list_messages(
		self,
		auth_user: AuthenticatedUser,
		conversation_id: UUID | str,
		*,
		limit: int = MESSAGE_PAGE_LIMIT,
	) -> MessageListResponse:
		"""Return the thread oldest first and mark it read for the viewer."""
		viewer_id = str(auth_user.id)
		conversation = await self._member_conversation(conversation_id, viewer_id)
		messages = await self._repo.list_messages(conversation.id, limit=limit)
		await self._mark_read(conversation.id, viewer_id)
		return MessageListResponse(
			conversation=await self.summarize(conversation, viewer_id),
			items=[MessageOut.from_message(m) for m in messages],
		)

	async def send_message(
		self,
		auth_user: AuthenticatedUser,
		conversation_id: UUID | str,
		content: str,
	) -> MessageOut:
		sender_id = str(auth_user.id)
		body = (content or "").strip()
		if not body:
			raise EmptyMessage()
		if len(body) > CONTENT_MAX_LENGTH:
			raise EmptyMessage("content_too_long")
		conversation = await self._member_conversation(conversation_id, sender_id)

		message = await self._repo.create_message(conversation.id, sender_id, body)
		obs_metrics.inc_chat_send(conversation.kind)
		if self._publish_events:
			try:
				await events.publish_message_event(message)
			except RedisError:
				obs_metrics.inc_chat_event("publish_failed")
				logger.warning("message event publish failed", exc_info=True, extra={"message_id": message.id})
		return MessageOut.from_message(message)

	async def _mark_read(self, conversation_id: str, viewer_id: str) -> int:
		marked = await self._repo.mark_read(conversation_id, viewer_id)
		obs_metrics.inc_chat_read(marked)
		return marked

	async def mark_read(self, auth_user: AuthenticatedUser, conversation_id: UUID | str) -> MarkReadResponse:
		viewer_id = str(auth_user.id)
		conversation = await self._member_conversation(conversation_id, viewer_id)
		marked = await self._mark_read(conversation.id, viewer_id)
		return MarkReadResponse(conversation_id=conversation.id, marked=marked)


_default_service: ChatService | None = None


def get_chat_service() -> ChatService:
	global _default_service
	if _default_service is None:
		_default_service = ChatService()
	return _default_service
