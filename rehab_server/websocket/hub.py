"""Socket.IO hub.

Authenticates connections, keeps per-socket state and bridges the
in-process subscription hub to individual sockets. Event handlers for
chat and search live in `handlers/`.
"""
import logging
import threading
from typing import Optional

from flask import Flask, request
from flask_socketio import SocketIO, emit, join_room

from rehab_server.exception import UnauthorizedError
from rehab_server.messaging.service import get_chat_service
from rehab_server.security.authentication import AuthSecurity
from rehab_server.security.session import session_from_payload
from rehab_server.websocket.state import SocketState, SocketRegistry

logger = logging.getLogger(__name__)

EVENT_CONNECTED = 'connected'
EVENT_ROOMS = 'chat:rooms'


class WebSocketHub:
    """Centralized WebSocket hub for real-time chat and search."""

    def __init__(self, socketio: SocketIO = None, timer_factory=threading.Timer):
        self.socketio = socketio
        self.sockets = SocketRegistry()
        self.timer_factory = timer_factory
        self._chat_handler = None
        self._search_handler = None

    def init_app(self, app: Flask, socketio: SocketIO):
        logger.debug(f"WS_HUB: init app={app.name}, mode={getattr(socketio, 'async_mode', '?')}")
        self.socketio = socketio
        self.app = app
        self._register_handlers()

        from rehab_server.websocket.handlers.chat_handler import ChatHandler
        from rehab_server.websocket.handlers.search_handler import SearchHandler
        self._chat_handler = ChatHandler(self)
        self._chat_handler.register_handlers()
        self._search_handler = SearchHandler(self)
        self._search_handler.register_handlers()
        logger.debug("WS_HUB: initialized")

    def emit_to_sid(self, sid: str, event: str, data):
        self.socketio.emit(event, data, to=sid)

    def current_state(self) -> SocketState:
        state = self.sockets.get(request.sid)
        if state is None:
            raise UnauthorizedError('Not authenticated')
        return state

    @staticmethod
    def _token_from_request(auth) -> Optional[str]:
        if auth and isinstance(auth, dict) and auth.get('token'):
            return auth.get('token')
        header = request.headers.get('Authorization', '')
        if header.startswith('Bearer '):
            return header.split(' ', 1)[1].strip()
        return request.args.get('token') or None

    def _register_handlers(self):

        @self.socketio.on_error_default
        def default_error_handler(e):
            logger.error(f"WS error: {e}")

        @self.socketio.on('connect')
        def handle_connect(auth=None):
            sid = request.sid
            try:
                payload = AuthSecurity.decode_token(self._token_from_request(auth))
                session = session_from_payload(payload)
            except UnauthorizedError as e:
                logger.warning(f"WS auth failed: sid={sid}: {e}")
                return False

            state = SocketState(sid, session)
            self.sockets.add(state)
            join_room(session.user_key)

            def on_inbox(topic, summary):
                self.emit_to_sid(sid, EVENT_ROOMS, summary)

            state.subscriptions.add(get_chat_service().subscribe_inbox(session, on_inbox))
            emit(EVENT_CONNECTED, {'userKey': session.user_key, 'socketId': sid})
            logger.info(f"WS connected: user={session.user_key}, sid={sid}")
            return True

        @self.socketio.on('disconnect')
        def handle_disconnect(*args):
            state = self.sockets.pop(request.sid)
            if state:
                state.close()
                logger.info(f"WS disconnected: user={state.session.user_key}, sid={state.sid}")


_hub: Optional[WebSocketHub] = None


def get_websocket_hub() -> Optional[WebSocketHub]:
    return _hub


def init_websocket_hub(app: Flask, socketio: SocketIO, timer_factory=threading.Timer) -> WebSocketHub:
    global _hub
    _hub = WebSocketHub(socketio, timer_factory=timer_factory)
    _hub.init_app(app, socketio)
    return _hub
