from .conversation_client import ConversationClient

__all__ = ["ConversationClient"]
