from datetime import datetime, timezone

import pytest

from app.domain.social.models import FriendRequest, FriendRequestStatus, Friendship, RelationshipState
from app.domain.social.relationship import RelationshipResolver

NOW = datetime(2024, 10, 1, tzinfo=timezone.utc)


def _request(request_id, from_user, to_user, status=FriendRequestStatus.PENDING):
	return FriendRequest(id=request_id, from_user=from_user, to_user=to_user, status=status, created_at=NOW)


def test_state_defaults_to_none():
	resolver = RelationshipResolver("alice")

	assert resolver.state_for("bob") is RelationshipState.NONE
	assert resolver.pending_request_for("bob") is None


def test_friendship_is_read_from_either_column():
	resolver = RelationshipResolver(
		"bob",
		friendships=[Friendship.between("alice", "bob"), Friendship.between("bob", "carol")],
	)

	assert resolver.friend_ids == {"alice", "carol"}
	assert resolver.state_for("alice") is RelationshipState.FRIENDS
	assert resolver.state_for("carol") is RelationshipState.FRIENDS


def test_sent_and_received_requests():
	resolver = RelationshipResolver(
		"alice",
		pending=[_request("r1", "alice", "bob"), _request("r2", "carol", "alice")],
	)

	assert resolver.state_for("bob") is RelationshipState.REQUEST_SENT
	assert resolver.state_for("carol") is RelationshipState.REQUEST_RECEIVED
	assert resolver.received_from("carol").id == "r2"


def test_friendship_wins_over_stale_pending_rows():
	resolver = RelationshipResolver(
		"alice",
		friendships=[Friendship.between("alice", "bob")],
		pending=[_request("r1", "bob", "alice")],
	)

	assert resolver.state_for("bob") is RelationshipState.FRIENDS


def test_sent_is_checked_before_received_when_both_pending():
	resolver = RelationshipResolver(
		"alice",
		pending=[_request("r1", "bob", "alice"), _request("r2", "alice", "bob")],
	)

	assert resolver.state_for("bob") is RelationshipState.REQUEST_SENT
	assert resolver.pending_request_for("bob").id == "r2"


def test_terminal_requests_are_ignored():
	resolver = RelationshipResolver(
		"alice",
		pending=[_request("r1", "alice", "bob", FriendRequestStatus.DECLINED)],
	)

	assert resolver.state_for("bob") is RelationshipState.NONE


def test_apply_folds_transitions_into_the_view():
	pending = _request("r1", "bob", "alice")
	resolver = RelationshipResolver("alice", pending=[pending])
	assert resolver.state_for("bob") is RelationshipState.REQUEST_RECEIVED

	accepted = _request("r1", "bob", "alice", FriendRequestStatus.ACCEPTED)
	assert resolver.apply(accepted) is RelationshipState.FRIENDS
	assert resolver.is_friend("bob")


def test_apply_cancel_reverts_to_none():
	resolver = RelationshipResolver("alice")
	assert resolver.apply(_request("r1", "alice", "bob")) is RelationshipState.REQUEST_SENT

	canceled = _request("r1", "alice", "bob", FriendRequestStatus.CANCELED)
	assert resolver.apply(canceled) is RelationshipState.NONE


def test_apply_rejects_unrelated_request():
	resolver = RelationshipResolver("alice")

	with pytest.raises(ValueError):
		resolver.apply(_request("r1", "bob", "carol"))
