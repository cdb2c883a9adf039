"""WebSocket module for real-time chat and search.

This module provides:
- Centralized WebSocket Hub (connection auth, per-socket subscriptions)
- Handlers for chat and search events
"""

from rehab_server.websocket.hub import WebSocketHub, init_websocket_hub, get_websocket_hub

__all__ = ['WebSocketHub', 'init_websocket_hub', 'get_websocket_hub']
