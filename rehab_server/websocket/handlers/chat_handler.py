"""WebSocket chat handler.

Client events:
- chat:open {with}                         open a conversation; ack is the newest history page
- chat:close                               stop live updates for the open conversation
- chat:send {to, text, mediaUrl, mediaType, tempId}
- chat:typing {isTyping}
- chat:read {with, messageKeys?}           ack {updated}
- chat:react {with, messageKey, reaction}

Server events:
- chat:message            new message in the open conversation
- chat:message:sent       confirmation to the sender, carries tempId
- chat:message:updated    reaction or read receipt changed
- chat:typing             typing flag of the other participant
- chat:rooms              inbox summary changed (see hub)
- chat:error              {code, message, tempId}
"""
import logging

from flask_socketio import emit

from rehab_server.messaging.service import get_chat_service, EVENT_MESSAGE, EVENT_MESSAGE_UPDATED
from rehab_server.websocket.errors import socket_event

logger = logging.getLogger(__name__)


class ChatHandler:
    """Handler for WebSocket chat events."""

    EVENT_MESSAGE_NEW = 'chat:message'
    EVENT_MESSAGE_SENT = 'chat:message:sent'
    EVENT_MESSAGE_UPDATED = 'chat:message:updated'
    EVENT_TYPING = 'chat:typing'

    def __init__(self, hub):
        self.hub = hub
        self.socketio = hub.socketio

    def _open(self, state, other_user_key):
        service = get_chat_service()
        group = state.switch_conversation(other_user_key)
        sid = state.sid

        def on_message(topic, payload):
            event = self.EVENT_MESSAGE_NEW if payload.get('event') == EVENT_MESSAGE else self.EVENT_MESSAGE_UPDATED
            self.hub.emit_to_sid(sid, event, payload.get('message'))

        def on_typing(topic, signal):
            self.hub.emit_to_sid(sid, self.EVENT_TYPING, signal)

        group.add(service.subscribe_messages(state.session, other_user_key, on_message))
        group.add(service.subscribe_typing(state.session, other_user_key, on_typing))
        logger.debug(f"{state.session.user_key} opened conversation with {other_user_key}")

    def register_handlers(self):
        """Register all chat WebSocket event handlers."""

        @self.socketio.on('chat:open')
        @socket_event
        def handle_open(data):
            state = self.hub.current_state()
            other = data.get('with')
            if not other:
                raise ValueError('with is required')
            # subscribe before reading so a message sent in between is pushed live;
            # clients dedupe the overlap by message id
            self._open(state, other)
            return get_chat_service().get_history(state.session, other).to_dict()

        @self.socketio.on('chat:close')
        @socket_event
        def handle_close(data):
            state = self.hub.current_state()
            state.switch_conversation(None)
            return {'closed': True}

        @self.socketio.on('chat:send')
        @socket_event
        def handle_send(data):
            state = self.hub.current_state()
            to = data.get('to') or state.conversation_with
            if not to:
                raise ValueError('to is required')
            message = get_chat_service().send_message(
                state.session,
                to,
                text=data.get('text') or '',
                media_url=data.get('mediaUrl'),
                media_type=data.get('mediaType')
            )
            emit(self.EVENT_MESSAGE_SENT, {'tempId': data.get('tempId'), 'message': message.to_dict()})

        @self.socketio.on('chat:typing')
        @socket_event
        def handle_typing(data):
            state = self.hub.current_state()
            get_chat_service().set_typing(state.session, bool(data.get('isTyping')))

        @self.socketio.on('chat:read')
        @socket_event
        def handle_read(data):
            state = self.hub.current_state()
            other = data.get('with') or state.conversation_with
            if not other:
                raise ValueError('with is required')
            keys = data.get('messageKeys')
            if keys is not None and not isinstance(keys, list):
                raise ValueError('messageKeys must be a list')
            return {'updated': get_chat_service().mark_read(state.session, other, keys)}

        @self.socketio.on('chat:react')
        @socket_event
        def handle_react(data):
            state = self.hub.current_state()
            other = data.get('with') or state.conversation_with
            if not other or not data.get('messageKey'):
                raise ValueError('with and messageKey are required')
            message = get_chat_service().react(state.session, other, data['messageKey'], data.get('reaction'))
            return {'message': message.to_dict()}
