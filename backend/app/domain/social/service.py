"""Service layer for friend requests and friendships."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional
from uuid import UUID

from redis.exceptions import RedisError

from app.domain.profiles.exceptions import ProfileRequired
from app.domain.profiles.models import Profile
from app.domain.profiles.repo import PostgresProfileRepository, ProfileRepository
from app.domain.profiles.schemas import ProfileOut
from app.domain.social import audit, policy, sockets
from app.domain.social.exceptions import (
	AlreadyFriends,
	RequestAlreadySent,
	RequestGone,
	RequestNotFound,
)
from app.domain.social.models import FriendRequest, FriendRequestStatus, RelationshipState
from app.domain.social.relationship import RelationshipResolver
from app.domain.social.repo import PostgresSocialRepository, SocialRepository
from app.domain.social.schemas import (
	FriendRequestOut,
	FriendRequestSummary,
	FriendUpdatePayload,
	RelationshipOut,
	RequestOutcome,
	RequestUpdatePayload,
)
from app.infra.auth import AuthenticatedUser

logger = logging.getLogger(__name__)


class SocialService:
	def __init__(
		self,
		repo: Optional[SocialRepository] = None,
		profiles: Optional[ProfileRepository] = None,
	) -> None:
		self._repo = repo or PostgresSocialRepository()
		self._profiles = profiles or PostgresProfileRepository()

	async def resolver_for(self, viewer_id: str) -> RelationshipResolver:
		return await RelationshipResolver.load(self._repo, str(viewer_id))

	async def send_request(
		self,
		auth_user: AuthenticatedUser,
		to_user_id: UUID | str,
		note: Optional[str] = None,
	) -> RequestOutcome:
		sender_id = str(auth_user.id)
		target_id = str(to_user_id)

		policy.guard_not_self(sender_id, target_id)
		existing = await self._profiles.existing_ids((sender_id, target_id))
		if sender_id not in existing:
			raise ProfileRequired()
		if target_id not in existing:
			audit.inc_send_reject("user_missing")
			raise RequestNotFound("user_missing")
		await policy.enforce_request_limits(sender_id)

		resolver = await self.resolver_for(sender_id)
		state = resolver.state_for(target_id)
		if state is RelationshipState.FRIENDS:
			audit.inc_send_reject("already_friends")
			raise AlreadyFriends()
		if state is RelationshipState.REQUEST_SENT:
			audit.inc_send_reject("already_sent")
			raise RequestAlreadySent()

		if state is RelationshipState.REQUEST_RECEIVED:
			reverse = resolver.received_from(target_id)
			accepted = await self._repo.accept_request(reverse.id)
			if accepted is not None:
				audit.inc_request_sent("auto_accept")
				await self._after_accept(accepted)
				return RequestOutcome(
					request=FriendRequestOut.from_request(accepted),
					relationship=resolver.apply(accepted),
				)
			if await self._repo.are_friends(sender_id, target_id):
				raise AlreadyFriends()

		created = await self._repo.create_request(sender_id, target_id, note)
		if created is None:
			audit.inc_send_reject("already_sent")
			raise RequestAlreadySent()

		audit.inc_request_sent("sent")
		await self._notify_sent(created)
		logger.info("friend request sent", extra={"friend_request_id": created.id, "user_id": sender_id})
		return RequestOutcome(
			request=FriendRequestOut.from_request(created),
			relationship=resolver.apply(created),
		)

	async def _load(self, request_id: UUID | str) -> FriendRequest:
		request = await self._repo.get_request(str(request_id))
		if request is None:
			raise RequestNotFound()
		return request

	async def accept_request(self, auth_user: AuthenticatedUser, request_id: UUID | str) -> RequestOutcome:
		user_id = str(auth_user.id)
		request = await self._load(request_id)
		policy.ensure_recipient(request, user_id)
		policy.ensure_pending(request)

		accepted = await self._repo.accept_request(request.id)
		if accepted is None:
			# Lost a race with another transition on the same request.
			raise RequestGone()
		await self._after_accept(accepted)
		return RequestOutcome(
			request=FriendRequestOut.from_request(accepted),
			relationship=RelationshipState.FRIENDS,
		)

	async def _after_accept(self, request: FriendRequest) -> None:
		audit.inc_transition(FriendRequestStatus.ACCEPTED.value)
		try:
			await audit.log_request_event("accepted", request)
			await audit.log_friend_event("created", *request.pair)
			await self._emit_update(request)
			for user_id, friend_id in (
				(request.from_user, request.to_user),
				(request.to_user, request.from_user),
			):
				payload = FriendUpdatePayload(user_id=user_id, friend_id=friend_id).model_dump(mode="json")
				await sockets.emit_friend_update(user_id, payload)
		except RedisError:
			self._notify_failed("accepted", request)
		logger.info("friend request accepted", extra={"friend_request_id": request.id})

	async def _close(
		self,
		auth_user: AuthenticatedUser,
		request_id: UUID | str,
		*,
		status: FriendRequestStatus,
	) -> RequestOutcome:
		user_id = str(auth_user.id)
		request = await self._load(request_id)
		if status is FriendRequestStatus.DECLINED:
			policy.ensure_recipient(request, user_id)
		else:
			policy.ensure_sender(request, user_id)
		policy.ensure_pending(request)

		closed = await self._repo.close_request(request.id, status)
		if closed is None:
			raise RequestGone()
		audit.inc_transition(status.value)
		try:
			await audit.log_request_event(status.value, closed)
			await self._emit_update(closed)
		except RedisError:
			self._notify_failed(status.value, closed)
		# A pending request in the other direction can outlive this one.
		resolver = await self.resolver_for(user_id)
		return RequestOutcome(
			request=FriendRequestOut.from_request(closed),
			relationship=resolver.apply(closed),
		)

	async def decline_request(self, auth_user: AuthenticatedUser, request_id: UUID | str) -> RequestOutcome:
		return await self._close(auth_user, request_id, status=FriendRequestStatus.DECLINED)

	async def cancel_request(self, auth_user: AuthenticatedUser, request_id: UUID | str) -> RequestOutcome:
		return await self._close(auth_user, request_id, status=FriendRequestStatus.CANCELED)

	async def _notify_sent(self, request: FriendRequest) -> None:
		try:
			await audit.log_request_event("sent", request)
			payload = await self._summary_payload(request, request.to_user)
			await sockets.emit_request_new(request.to_user, payload)
		except RedisError:
			self._notify_failed("sent", request)

	def _notify_failed(self, event: str, request: FriendRequest) -> None:
		# The transition is already committed; only the audit trail and push are lost.
		audit.inc_notify_failure(event)
		logger.warning(
			"friend request notification failed",
			exc_info=True,
			extra={"friend_request_id": request.id, "event": event},
		)

	async def _emit_update(self, request: FriendRequest) -> None:
		payload = RequestUpdatePayload(id=request.id, status=request.status.value).model_dump(mode="json")
		await sockets.emit_request_update(request.from_user, payload)
		await sockets.emit_request_update(request.to_user, payload)

	async def _summary_payload(self, request: FriendRequest, viewer_id: str) -> dict:
		summaries = await self._summaries([request], viewer_id)
		return summaries[0].model_dump(mode="json")

	async def _summaries(self, requests: List[FriendRequest], viewer_id: str) -> List[FriendRequestSummary]:
		counterpart_ids = [r.from_user if r.to_user == viewer_id else r.to_user for r in requests]
		profiles: Dict[str, Profile] = {p.id: p for p in await self._profiles.get_profiles(counterpart_ids)}
		return [
			FriendRequestSummary(
				request=FriendRequestOut.from_request(request),
				counterpart=ProfileOut.from_profile(profiles[other]) if other in profiles else None,
			)
			for request, other in zip(requests, counterpart_ids)
		]

	async def list_incoming(self, auth_user: AuthenticatedUser) -> List[FriendRequestSummary]:
		user_id = str(auth_user.id)
		return await self._summaries(await self._repo.list_incoming(user_id), user_id)

	async def list_outgoing(self, auth_user: AuthenticatedUser) -> List[FriendRequestSummary]:
		user_id = str(auth_user.id)
		return await self._summaries(await self._repo.list_outgoing(user_id), user_id)

	async def list_friends(self, auth_user: AuthenticatedUser) -> List[ProfileOut]:
		resolver = await self.resolver_for(auth_user.id)
		friends = await self._profiles.get_profiles(sorted(resolver.friend_ids))
		friends.sort(key=lambda p: p.full_name.lower())
		return [ProfileOut.from_profile(p) for p in friends]

	async def get_relationship(self, auth_user: AuthenticatedUser, other_id: UUID | str) -> RelationshipOut:
		resolver = await self.resolver_for(auth_user.id)
		pending = resolver.pending_request_for(str(other_id))
		state = resolver.state_for(str(other_id))
		return RelationshipOut(
			user_id=str(other_id),
			relationship=state,
			request_id=pending.id if pending and state is not RelationshipState.FRIENDS else None,
		)


_default_service: SocialService | None = None


def get_social_service() -> SocialService:
	global _default_service
	if _default_service is None:
		_default_service = SocialService()
	return _default_service
