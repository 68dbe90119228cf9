"""Socket.IO namespace for conversation channels."""

from __future__ import annotations

from typing import Dict, Optional, Set

import socketio

from app.infra.auth import AuthenticatedUser, resolve_socket_user
from app.obs import metrics as obs_metrics

_namespace: "ChatNamespace" | None = None


class ChatNamespace(socketio.AsyncNamespace):
	"""Keeps each client in a personal room plus the conversation rooms it has opened."""

	def __init__(self, membership=None) -> None:
		super().__init__("/chat")
		self._sessions: Dict[str, AuthenticatedUser] = {}
		self._subscriptions: Dict[str, Set[str]] = {}
		self._membership = membership

	async def trigger_event(self, event: str, *args):
		# Client events use "conversation:join" style names.
		return await super().trigger_event(event.replace(":", "_"), *args)

	async def on_connect(self, sid: str, environ: dict, auth: Optional[dict] = None) -> None:
		obs_metrics.socket_connected(self.namespace)
		user = resolve_socket_user(environ, auth)
		if user is None:
			obs_metrics.socket_disconnected(self.namespace)
			raise ConnectionRefusedError("unauthenticated")
		self._sessions[sid] = user
		self._subscriptions[sid] = set()
		await self.enter_room(sid, self.user_room(user.id))
		await self.emit("chat:ack", {"ok": True}, room=sid)

	async def on_disconnect(self, sid: str, reason: Optional[str] = None) -> None:
		obs_metrics.socket_disconnected(self.namespace)
		user = self._sessions.pop(sid, None)
		for conversation_id in self._subscriptions.pop(sid, set()):
			await self.leave_room(sid, self.conversation_room(conversation_id))
		if user:
			await self.leave_room(sid, self.user_room(user.id))

	async def on_conversation_join(self, sid: str, payload: dict) -> dict:
		obs_metrics.socket_event(self.namespace, "conversation:join")
		user = self._sessions.get(sid)
		if not user:
			raise ConnectionRefusedError("unauthenticated")
		conversation_id = str((payload or {}).get("conversation_id") or "")
		if not conversation_id:
			return {"ok": False, "error": "missing_conversation_id"}
		if self._membership is None or not await self._membership(conversation_id, user.id):
			return {"ok": False, "error": "not_member"}
		await self.enter_room(sid, self.conversation_room(conversation_id))
		self._subscriptions.setdefault(sid, set()).add(conversation_id)
		return {"ok": True}

	async def on_conversation_leave(self, sid: str, payload: dict) -> dict:
		obs_metrics.socket_event(self.namespace, "conversation:leave")
		conversation_id = str((payload or {}).get("conversation_id") or "")
		subscribed = self._subscriptions.get(sid, set())
		if conversation_id in subscribed:
			subscribed.discard(conversation_id)
			await self.leave_room(sid, self.conversation_room(conversation_id))
		return {"ok": True}

	def subscriptions(self, sid: str) -> Set[str]:
		return set(self._subscriptions.get(sid, set()))

	@staticmethod
	def user_room(user_id: str) -> str:
		return f"user:{user_id}"

	@staticmethod
	def conversation_room(conversation_id: str) -> str:
		return f"conversation:{conversation_id}"


def set_namespace(namespace: ChatNamespace | None) -> None:
	global _namespace
	_namespace = namespace


async def emit_message_new(conversation_id: str, payload: dict) -> None:
	if _namespace is None:
		return
	obs_metrics.socket_event(_namespace.namespace, "message:new")
	await _namespace.emit("message:new", payload, room=ChatNamespace.conversation_room(conversation_id))


async def emit_conversation_update(user_id: str, payload: dict) -> None:
	if _namespace is None:
		return
	obs_metrics.socket_event(_namespace.namespace, "conversation:update")
	await _namespace.emit("conversation:update", payload, room=ChatNamespace.user_room(user_id))
