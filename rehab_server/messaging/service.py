"""Chat service layer.

Coordinates the message log, the room and inbox read models, typing
flags and the live subscription hub. Every operation takes the caller's
`Session` explicitly.

The message log is authoritative. Room and inbox summaries are updated
after the append as separate writes, so a failure between them leaves
the summaries stale but never loses a message.
"""
import logging
from typing import Any, Callable, Dict, List, Optional

from config import config
from rehab_server.exception import ForbiddenError, NotFoundError
from rehab_server.messaging.identity import resolve_room_id, room_participants
from rehab_server.messaging.models import (
    Message, MediaType, ChatRoomSummary, TypingSignal, MessagePage
)
from rehab_server.realtime.subscriptions import (
    Subscription, get_subscription_hub,
    messages_topic, user_chat_rooms_topic, typing_topic
)
from rehab_server.repository.mongo_helper import MongoRepositorySingleton
from rehab_server.security.session import Session, require_session
from rehab_server.utils.generator import generate_push_key, get_current_timestamp_ms

logger = logging.getLogger(__name__)

EVENT_MESSAGE = 'message'
EVENT_MESSAGE_UPDATED = 'message_updated'


class ChatService:
    """Two-party chat: send, history, reactions, read receipts, typing, inbox."""

    def __init__(self, repositories=None, hub=None, clock: Callable[[], int] = None):
        repos = repositories or MongoRepositorySingleton.get_instance()
        self.messages = repos.message
        self.rooms = repos.chat_room
        self.inbox = repos.user_chat_rooms
        self.typing = repos.typing
        self.hub = hub or get_subscription_hub()
        self.clock = clock or get_current_timestamp_ms

    # =========================================================================
    # Rooms
    # =========================================================================

    @staticmethod
    def _room_for(session: Session, other_user_key: str) -> str:
        if not other_user_key:
            raise ValueError('other user is required')
        if other_user_key == session.user_key:
            raise ValueError('cannot open a conversation with yourself')
        return resolve_room_id(session.user_key, other_user_key)

    # =========================================================================
    # Messages
    # =========================================================================

    def send_message(
        self,
        session: Optional[Session],
        other_user_key: str,
        text: str = '',
        media_url: Optional[str] = None,
        media_type: Optional[str] = None
    ) -> Message:
        """Append a message and refresh both participants' inbox entries."""
        session = require_session(session)
        room_id = self._room_for(session, other_user_key)
        text = (text or '').strip()
        kind = MediaType.parse(media_type) if media_url else MediaType.NONE
        if not text and not media_url:
            raise ValueError('message text or media is required')

        now = self.clock()
        message = Message(
            key=generate_push_key(now),
            room_id=room_id,
            sender_key=session.user_key,
            text=text,
            media_url=media_url,
            media_type=kind,
            timestamp=now,
            read_by=[session.user_key]
        )
        self.messages.append(message.to_db_doc())
        logger.info(f"Message {message.key} sent in {room_id} by {session.user_key}")

        participants = room_participants(session.user_key, other_user_key)
        preview = text or f'[{kind.value or "media"}]'
        self.rooms.upsert_last_message(room_id, participants, preview, now)
        for user_key in participants:
            self.inbox.update_summary(user_key, room_id, participants, preview, now)

        self.hub.publish(messages_topic(room_id), {'event': EVENT_MESSAGE, 'message': message.to_dict()})
        for user_key in participants:
            summary = ChatRoomSummary(user_key, room_id, participants, preview, now)
            self.hub.publish(user_chat_rooms_topic(user_key), summary.to_dict())
        return message

    def get_history(
        self,
        session: Optional[Session],
        other_user_key: str,
        cursor: Optional[str] = None,
        page_size: Optional[int] = None
    ) -> MessagePage:
        """One page of the conversation ending at `cursor`, oldest first.

        Fetches one record more than the page size; that extra, oldest record
        becomes the next cursor and is left out of this page, so the following
        call starts exactly at it and no message is repeated or skipped.
        """
        session = require_session(session)
        room_id = self._room_for(session, other_user_key)
        page_size = page_size or config.CHAT_PAGE_SIZE
        if page_size < 1:
            raise ValueError('page_size must be >= 1')

        docs = self.messages.fetch_ending_at(room_id, cursor, page_size + 1)
        next_cursor = None
        if len(docs) > page_size:
            next_cursor = docs[page_size].get('key')
            docs = docs[:page_size]
        messages = [Message.from_doc(doc) for doc in reversed(docs)]
        return MessagePage(messages, next_cursor)

    def get_full_history(self, session: Optional[Session], other_user_key: str) -> List[Message]:
        session = require_session(session)
        room_id = self._room_for(session, other_user_key)
        return [Message.from_doc(doc) for doc in self.messages.fetch_all(room_id)]

    def react(self, session: Optional[Session], other_user_key: str, message_key: str, reaction: str) -> Message:
        """Set or replace the caller's reaction; the last write wins."""
        session = require_session(session)
        room_id = self._room_for(session, other_user_key)
        reaction = (reaction or '').strip()
        if not reaction:
            raise ValueError('reaction must be a non-empty symbol')
        if not self.messages.set_reaction(room_id, message_key, session.user_key, reaction):
            raise NotFoundError(f'Message {message_key} not found')
        message = Message.from_doc(self.messages.get(room_id, message_key))
        self.hub.publish(messages_topic(room_id), {'event': EVENT_MESSAGE_UPDATED, 'message': message.to_dict()})
        return message

    def mark_read(
        self,
        session: Optional[Session],
        other_user_key: str,
        message_keys: Optional[List[str]] = None
    ) -> int:
        """Add the caller to `read_by` of messages they received.

        With no keys every unread message in the room is marked. Messages the
        caller sent or already read are left alone, so repeating the call is
        harmless. Returns how many messages changed.
        """
        session = require_session(session)
        room_id = self._room_for(session, other_user_key)
        if message_keys is None:
            message_keys = self.messages.unread_keys(room_id, session.user_key)

        changed = [key for key in message_keys if self.messages.add_reader(room_id, key, session.user_key)]
        for doc in self.messages.get_many(room_id, changed):
            payload = {'event': EVENT_MESSAGE_UPDATED, 'message': Message.from_doc(doc).to_dict()}
            self.hub.publish(messages_topic(room_id), payload)
        if changed:
            logger.debug(f"{session.user_key} read {len(changed)} messages in {room_id}")
        return len(changed)

    def unread_count(self, session: Optional[Session], other_user_key: str) -> int:
        session = require_session(session)
        return self.messages.count_unread(self._room_for(session, other_user_key), session.user_key)

    # =========================================================================
    # Inbox
    # =========================================================================

    def list_inbox(self, session: Optional[Session]) -> List[ChatRoomSummary]:
        """The caller's conversations, most recent activity first."""
        session = require_session(session)
        summaries = [ChatRoomSummary.from_doc(doc) for doc in self.inbox.list_for_user(session.user_key)]
        summaries.sort(key=lambda s: (s.last_message_timestamp, s.room_id), reverse=True)
        return summaries

    # =========================================================================
    # Typing
    # =========================================================================

    def set_typing(self, session: Optional[Session], is_typing: bool) -> TypingSignal:
        session = require_session(session)
        signal = TypingSignal(session.user_key, bool(is_typing), self.clock())
        self.typing.set_typing(signal.user_key, signal.is_typing, signal.timestamp)
        self.hub.publish(typing_topic(session.user_key), signal.to_dict(signal.timestamp, config.TYPING_TTL_SECONDS))
        return signal

    def get_typing(self, user_key: str) -> TypingSignal:
        return TypingSignal.from_doc(user_key, self.typing.get(user_key))

    def is_typing(self, user_key: str) -> bool:
        """Stored flag with staleness applied; an old `true` reads as not typing."""
        return self.get_typing(user_key).is_active(self.clock(), config.TYPING_TTL_SECONDS)

    def typing_status(self, user_key: str) -> Dict[str, Any]:
        return self.get_typing(user_key).to_dict(self.clock(), config.TYPING_TTL_SECONDS)

    def typing_status_for(self, session: Optional[Session], user_key: str) -> Dict[str, Any]:
        """Typing status of `user_key`, visible only to someone sharing a room with them."""
        session = require_session(session)
        if user_key != session.user_key and self.rooms.get(self._room_for(session, user_key)) is None:
            raise ForbiddenError('No conversation with this user')
        return self.typing_status(user_key)

    # =========================================================================
    # Live subscriptions
    # =========================================================================

    def subscribe_messages(self, session: Optional[Session], other_user_key: str,
                           callback: Callable[[str, Any], None]) -> Subscription:
        session = require_session(session)
        return self.hub.subscribe(messages_topic(self._room_for(session, other_user_key)), callback)

    def subscribe_inbox(self, session: Optional[Session], callback: Callable[[str, Any], None]) -> Subscription:
        session = require_session(session)
        return self.hub.subscribe(user_chat_rooms_topic(session.user_key), callback)

    def subscribe_typing(self, session: Optional[Session], other_user_key: str,
                         callback: Callable[[str, Any], None]) -> Subscription:
        session = require_session(session)
        self._room_for(session, other_user_key)
        return self.hub.subscribe(typing_topic(other_user_key), callback)


_chat_service = None


def get_chat_service() -> ChatService:
    """Get singleton chat service instance."""
    global _chat_service
    if _chat_service is None:
        _chat_service = ChatService()
    return _chat_service


def reset_chat_service():
    global _chat_service
    _chat_service = None
