"""Viewer-relative relationship derivation.

Relationship state is never stored. It is recomputed from the viewer's
friendships and pending requests each time a surface needs it, and the
resolver can fold in the outcome of a transition so callers report the new
state without re-reading storage.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, Optional, Set

from app.domain.social.models import FriendRequest, FriendRequestStatus, Friendship, RelationshipState

if TYPE_CHECKING:
	from app.domain.social.repo import SocialRepository


class RelationshipResolver:
	def __init__(
		self,
		viewer_id: str,
		friendships: Iterable[Friendship] = (),
		pending: Iterable[FriendRequest] = (),
	) -> None:
		self.viewer_id = str(viewer_id)
		self._friend_ids: Set[str] = set()
		self._sent: Dict[str, FriendRequest] = {}
		self._received: Dict[str, FriendRequest] = {}
		for friendship in friendships:
			other = friendship.other(self.viewer_id)
			if other is not None:
				self._friend_ids.add(other)
		for request in pending:
			self._track(request)

	@classmethod
	async def load(cls, repo: "SocialRepository", viewer_id: str) -> "RelationshipResolver":
		friendships = await repo.list_friendships(viewer_id)
		pending = await repo.list_pending_for(viewer_id)
		return cls(viewer_id, friendships, pending)

	def _track(self, request: FriendRequest) -> None:
		if request.status is not FriendRequestStatus.PENDING:
			return
		if request.from_user == self.viewer_id:
			self._sent[request.to_user] = request
		elif request.to_user == self.viewer_id:
			self._received[request.from_user] = request

	@property
	def friend_ids(self) -> Set[str]:
		return set(self._friend_ids)

	def is_friend(self, other_id: str) -> bool:
		return str(other_id) in self._friend_ids

	def state_for(self, other_id: str) -> RelationshipState:
		other_id = str(other_id)
		if other_id in self._friend_ids:
			return RelationshipState.FRIENDS
		if other_id in self._sent:
			return RelationshipState.REQUEST_SENT
		if other_id in self._received:
			return RelationshipState.REQUEST_RECEIVED
		return RelationshipState.NONE

	def pending_request_for(self, other_id: str) -> Optional[FriendRequest]:
		"""Return the pending request between viewer and ``other_id``, sent side first."""
		other_id = str(other_id)
		return self._sent.get(other_id) or self._received.get(other_id)

	def received_from(self, other_id: str) -> Optional[FriendRequest]:
		return self._received.get(str(other_id))

	def apply(self, request: FriendRequest) -> RelationshipState:
		"""Fold a request's current status into the view and return the new state."""
		if request.from_user == self.viewer_id:
			other_id = request.to_user
		elif request.to_user == self.viewer_id:
			other_id = request.from_user
		else:
			raise ValueError("request does not involve the viewer")

		for bucket in (self._sent, self._received):
			tracked = bucket.get(other_id)
			if tracked is not None and tracked.id == request.id:
				del bucket[other_id]

		if request.status is FriendRequestStatus.PENDING:
			self._track(request)
		elif request.status is FriendRequestStatus.ACCEPTED:
			self._friend_ids.add(other_id)
			self._sent.pop(other_id, None)
			self._received.pop(other_id, None)
		return self.state_for(other_id)


__all__ = ["RelationshipResolver"]
