"""Domain-level exceptions for conversations and messages."""

from __future__ import annotations


class ChatError(Exception):
    """Base class for chat errors."""

    reason: str = "unknown"

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(reason or self.reason)
        if reason:
            self.reason = reason


class ChatNotFound(ChatError):
    reason = "not_found"


class ConversationNotFound(ChatNotFound):
    reason = "conversation_not_found"


class MemberNotFound(ChatNotFound):
    reason = "member_missing"


class NotAMember(ChatError):
    reason = "not_member"


class ChatInvalid(ChatError):
    reason = "invalid"


class SelfConversation(ChatInvalid):
    reason = "self_conversation"


class GroupTooSmall(ChatInvalid):
    reason = "group_too_small"


class EmptyMessage(ChatInvalid):
    reason = "empty_message"
