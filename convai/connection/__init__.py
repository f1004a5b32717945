from .token_service import TokenService
from .transport import Transport, ConnectionState
from .websocket_transport import WebSocketTransport

__all__ = ["ConnectionState", "TokenService", "Transport", "WebSocketTransport"]
