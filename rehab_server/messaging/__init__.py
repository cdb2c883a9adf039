"""Two-party chat: room identity, message log, read receipts, typing and inbox."""
from rehab_server.messaging.identity import resolve_room_id, room_participants
from rehab_server.messaging.models import (
    Message, MediaType, ChatRoomSummary, TypingSignal, MessagePage
)
from rehab_server.messaging.service import ChatService, get_chat_service, reset_chat_service

__all__ = [
    'resolve_room_id', 'room_participants',
    'Message', 'MediaType', 'ChatRoomSummary', 'TypingSignal', 'MessagePage',
    'ChatService', 'get_chat_service', 'reset_chat_service'
]
