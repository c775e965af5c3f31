"""Chat Service: risk-aware handling of support chat messages."""

from .handler import ChatSessionHandler, MOCK_ASSISTANT_RESPONSE, default_session_id

__all__ = [
    "ChatSessionHandler",
    "MOCK_ASSISTANT_RESPONSE",
    "default_session_id",
]
