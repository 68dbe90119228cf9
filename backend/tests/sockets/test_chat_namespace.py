from unittest.mock import AsyncMock

import pytest
import socketio

from app.domain.chat.sockets import ChatNamespace


def _environ(user_id: str | None = None) -> dict:
	headers = [(b"x-user-id", user_id.encode())] if user_id else []
	return {"asgi.scope": {"headers": headers}}


def _namespace(members: dict[str, set[str]]) -> ChatNamespace:
	async def membership(conversation_id, user_id):
		return user_id in members.get(conversation_id, set())

	server = socketio.AsyncServer(async_mode="asgi")
	namespace = ChatNamespace(membership=membership)
	server.register_namespace(namespace)
	namespace.emit = AsyncMock()
	namespace.enter_room = AsyncMock()
	namespace.leave_room = AsyncMock()
	return namespace


@pytest.mark.asyncio
async def test_connect_requires_identity():
	namespace = _namespace({})

	with pytest.raises(ConnectionRefusedError):
		await namespace.trigger_event("connect", "sid-1", _environ())


@pytest.mark.asyncio
async def test_connect_joins_personal_room():
	namespace = _namespace({})

	await namespace.trigger_event("connect", "sid-1", _environ("user-1"))

	namespace.enter_room.assert_awaited_with("sid-1", "user:user-1")
	assert namespace.emit.await_args.args[0] == "chat:ack"


@pytest.mark.asyncio
async def test_join_checks_membership():
	namespace = _namespace({"conv-1": {"user-1"}})
	await namespace.trigger_event("connect", "sid-1", _environ("user-1"))

	denied = await namespace.trigger_event("conversation:join", "sid-1", {"conversation_id": "conv-2"})
	joined = await namespace.trigger_event("conversation:join", "sid-1", {"conversation_id": "conv-1"})
	missing = await namespace.trigger_event("conversation:join", "sid-1", {})

	assert denied == {"ok": False, "error": "not_member"}
	assert joined == {"ok": True}
	assert missing == {"ok": False, "error": "missing_conversation_id"}
	assert namespace.subscriptions("sid-1") == {"conv-1"}
	namespace.enter_room.assert_awaited_with("sid-1", "conversation:conv-1")


@pytest.mark.asyncio
async def test_leave_and_disconnect_drop_subscriptions():
	namespace = _namespace({"conv-1": {"user-1"}, "conv-2": {"user-1"}})
	await namespace.trigger_event("connect", "sid-1", _environ("user-1"))
	await namespace.trigger_event("conversation:join", "sid-1", {"conversation_id": "conv-1"})
	await namespace.trigger_event("conversation:join", "sid-1", {"conversation_id": "conv-2"})

	await namespace.trigger_event("conversation:leave", "sid-1", {"conversation_id": "conv-1"})
	assert namespace.subscriptions("sid-1") == {"conv-2"}

	await namespace.trigger_event("disconnect", "sid-1")

	assert namespace.subscriptions("sid-1") == set()
	left = {call.args[1] for call in namespace.leave_room.await_args_list}
	assert left == {"conversation:conv-1", "conversation:conv-2", "user:user-1"}
