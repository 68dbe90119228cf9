"""Chat domain exports."""

from .models import Conversation, ConversationKey, Message
from .naming import display_name

__all__ = [
	"Conversation",
	"ConversationKey",
	"Message",
	"display_name",
]
