"""Realtime dispatcher bridging the chat message stream to Socket.IO."""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from typing import Mapping, Optional

from app.domain.chat import events, sockets
from app.domain.chat.service import ChatService
from app.infra.redis import redis_client
from app.obs import metrics as obs_metrics
from app.settings import settings

_LOG = logging.getLogger(__name__)


class MessageEventDispatcher:
	"""Consumes ``message.new`` events and fans them out to conversation and member rooms.

	Each message id is handled at most once per dispatcher instance; ids are
	remembered in a bounded LRU window.
	"""

	def __init__(
		self,
		service: ChatService,
		*,
		stream: Optional[str] = None,
		start_id: str = "$",
		dedupe_window: int = 4096,
		poll_interval: float = 0.5,
		batch_size: int = 100,
		block_ms: Optional[int] = 1000,
	) -> None:
		self.service = service
		self.stream = stream or settings.chat_events_stream
		self.poll_interval = poll_interval
		self.batch_size = batch_size
		self.block_ms = block_ms
		self._last_id = start_id
		self._seen: "OrderedDict[str, None]" = OrderedDict()
		self._dedupe_window = dedupe_window
		self._stopped = asyncio.Event()

	@property
	def stopped(self) -> bool:
		return self._stopped.is_set()

	def _remember(self, message_id: str) -> bool:
		if message_id in self._seen:
			self._seen.move_to_end(message_id)
			return False
		self._seen[message_id] = None
		while len(self._seen) > self._dedupe_window:
			self._seen.popitem(last=False)
		return True

	async def handle_event(self, fields: Mapping) -> bool:
		"""Dispatch one stream entry; returns ``False`` when it was skipped."""
		payload = events.decode_event(fields)
		if payload.get("event") != events.MESSAGE_NEW or not payload.get("message_id"):
			obs_metrics.inc_chat_event("ignored")
			return False
		if not self._remember(payload["message_id"]):
			obs_metrics.inc_chat_event("duplicate")
			return False

		message = await self.service.repo.get_message(payload["message_id"])
		if message is None:
			obs_metrics.inc_chat_event("missing")
			return False
		conversation = await self.service.repo.get_conversation(message.conversation_id)
		if conversation is None:
			obs_metrics.inc_chat_event("missing")
			return False

		await sockets.emit_message_new(conversation.id, message.to_dict())
		for member_id in conversation.member_ids:
			summary = await self.service.summarize(conversation, member_id)
			await sockets.emit_conversation_update(member_id, summary.model_dump(mode="json"))
		obs_metrics.inc_chat_event("dispatched")
		return True

	async def process_once(self) -> int:
		if self.stopped:
			return 0
		batches = await redis_client.xread(
			streams={self.stream: self._last_id},
			count=self.batch_size,
			block=self.block_ms,
		)
		processed = 0
		for _stream, entries in batches or []:
			for entry_id, fields in entries:
				if self.stopped:
					return processed
				self._last_id = events.as_text(entry_id)
				try:
					if await self.handle_event(fields):
						processed += 1
				except Exception:
					obs_metrics.inc_chat_event("failed")
					_LOG.exception("chat_dispatcher.dispatch_failed", extra={"entry_id": self._last_id})
		return processed

	async def run_forever(self) -> None:
		_LOG.info("chat_dispatcher.started", extra={"stream": self.stream})
		while not self.stopped:
			try:
				processed = await self.process_once()
			except asyncio.CancelledError:
				raise
			except Exception:
				_LOG.exception("chat_dispatcher.read_failed")
				processed = 0
			if processed == 0 and not self.stopped:
				try:
					await asyncio.wait_for(self._stopped.wait(), timeout=self.poll_interval)
				except asyncio.TimeoutError:
					pass
		_LOG.info("chat_dispatcher.stopped")

	def stop(self) -> None:
		self._stopped.set()
