"""Read-time display names for conversations."""

from __future__ import annotations

from typing import Mapping

from app.domain.chat.models import Conversation
from app.domain.profiles.models import Profile

GROUP_FALLBACK_NAME = "Group Chat"
DIRECT_FALLBACK_NAME = "Unknown"
GROUP_NAME_PREVIEW = 3


def display_name(conversation: Conversation, viewer_id: str, profiles: Mapping[str, Profile]) -> str:
	"""Name a conversation as ``viewer_id`` should see it.

	Named groups keep their name. Unnamed groups list the first names of the
	first few other members with a ``+N`` suffix for the rest. Direct threads
	show the other participant's full name.
	"""
	others = [profiles[uid] for uid in conversation.others(viewer_id) if uid in profiles]
	if conversation.is_group:
		if conversation.group_name and conversation.group_name.strip():
			return conversation.group_name.strip()
		if not others:
			return GROUP_FALLBACK_NAME
		shown = ", ".join(p.first_name for p in others[:GROUP_NAME_PREVIEW])
		extra = len(others) - GROUP_NAME_PREVIEW
		return f"{shown} +{extra}" if extra > 0 else shown
	if not others:
		return DIRECT_FALLBACK_NAME
	return others[0].full_name
