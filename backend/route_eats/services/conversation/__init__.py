"""Chat sessions with confirmation before a search runs."""

from .service import (
    ChatReply,
    ConversationService,
    ConversationSession,
    ConversationState,
    confirmation_prompt,
    is_confirmation,
)

__all__ = [
    "ChatReply",
    "ConversationService",
    "ConversationSession",
    "ConversationState",
    "confirmation_prompt",
    "is_confirmation",
]
