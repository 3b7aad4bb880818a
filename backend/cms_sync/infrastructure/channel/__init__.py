from .websocket_connection import WebSocketChannelConnection, connect_websocket

__all__ = ["WebSocketChannelConnection", "connect_websocket"]
