"""Message events published to the chat Redis stream."""

from __future__ import annotations

from typing import Dict, Mapping

from app.domain.chat.models import Message
from app.infra.redis import redis_client
from app.settings import settings

MESSAGE_NEW = "message.new"
STREAM_MAXLEN = 10_000


def as_text(value) -> str:
	return value.decode() if isinstance(value, bytes) else str(value)


def message_event(message: Message) -> Dict[str, str]:
	return {
		"event": MESSAGE_NEW,
		"message_id": message.id,
		"conversation_id": message.conversation_id,
		"sender_id": message.sender_id,
	}


def decode_event(fields: Mapping) -> Dict[str, str]:
	return {as_text(key): as_text(value) for key, value in fields.items()}


async def publish_message_event(message: Message, *, stream: str | None = None) -> str:
	entry_id = await redis_client.xadd(
		stream or settings.chat_events_stream,
		message_event(message),
		maxlen=STREAM_MAXLEN,
		approximate=True,
	)
	return as_text(entry_id)
