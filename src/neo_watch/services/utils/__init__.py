"""Service helpers for WebSocket chat handling."""
from neo_watch.services.utils.chat_socket import (WebSocketConnection,
                                                  dispatch_frame,
                                                  handle_chat_socket)

__all__ = ["WebSocketConnection", "dispatch_frame", "handle_chat_socket"]
