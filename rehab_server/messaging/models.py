"""Chat data models.

Collections:
- chat_rooms: one document per two-party room (id derived from participants)
- user_chat_rooms: per-user inbox entries (last message, last timestamp)
- messages: message log, ordered by server-assigned push key
- typing: one ephemeral typing flag per user

All timestamps are server epoch milliseconds.
"""
from typing import Optional, Dict, Any, List
from enum import Enum


class MediaType(str, Enum):
    NONE = ""
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"

    @classmethod
    def from_content_type(cls, content_type: Optional[str]) -> 'MediaType':
        content_type = (content_type or '').lower()
        for kind in (cls.IMAGE, cls.VIDEO, cls.AUDIO):
            if content_type.startswith(f'{kind.value}/'):
                return kind
        return cls.NONE

    @classmethod
    def parse(cls, value: Optional[str]) -> 'MediaType':
        if not value:
            return cls.NONE
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f'Unsupported media type: {value}')


class Message:
    """Message document structure."""

    def __init__(
        self,
        key: str,
        room_id: str,
        sender_key: str,
        text: str = '',
        media_url: Optional[str] = None,
        media_type: MediaType = MediaType.NONE,
        timestamp: int = 0,
        reactions: Optional[Dict[str, str]] = None,
        read_by: Optional[List[str]] = None
    ):
        self.key = key
        self.room_id = room_id
        self.sender_key = sender_key
        self.text = text
        self.media_url = media_url
        self.media_type = media_type
        self.timestamp = timestamp
        # user_key -> reaction symbol, one per user
        self.reactions = reactions or {}
        self.read_by = read_by or []

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.key,
            'roomId': self.room_id,
            'senderId': self.sender_key,
            'text': self.text,
            'mediaUrl': self.media_url,
            'mediaType': self.media_type.value if isinstance(self.media_type, MediaType) else self.media_type,
            'timestamp': self.timestamp,
            'reactions': dict(self.reactions),
            'readBy': list(self.read_by)
        }

    def to_db_doc(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'room_id': self.room_id,
            'sender_key': self.sender_key,
            'text': self.text,
            'media_url': self.media_url,
            'media_type': self.media_type.value if isinstance(self.media_type, MediaType) else self.media_type,
            'timestamp': self.timestamp,
            'reactions': dict(self.reactions),
            'read_by': list(self.read_by)
        }

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> 'Message':
        media_type = doc.get('media_type') or ''
        try:
            media_type = MediaType(media_type)
        except ValueError:
            media_type = MediaType.NONE
        return cls(
            key=doc.get('key') or str(doc.get('_id', '')),
            room_id=doc.get('room_id') or '',
            sender_key=doc.get('sender_key') or '',
            text=doc.get('text') or '',
            media_url=doc.get('media_url'),
            media_type=media_type,
            timestamp=doc.get('timestamp') or 0,
            reactions=doc.get('reactions') or {},
            read_by=doc.get('read_by') or []
        )


class ChatRoomSummary:
    """One entry of a user's inbox."""

    def __init__(
        self,
        user_key: str,
        room_id: str,
        participants: List[str],
        last_message: str = '',
        last_message_timestamp: int = 0
    ):
        self.user_key = user_key
        self.room_id = room_id
        self.participants = participants
        self.last_message = last_message
        self.last_message_timestamp = last_message_timestamp

    @property
    def other_participant(self) -> Optional[str]:
        others = [p for p in self.participants if p != self.user_key]
        return others[0] if others else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.room_id,
            'participants': list(self.participants),
            'otherUserId': self.other_participant,
            'lastMessage': self.last_message,
            'lastMessageTimestamp': self.last_message_timestamp
        }

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> 'ChatRoomSummary':
        return cls(
            user_key=doc.get('user_key') or '',
            room_id=doc.get('room_id') or '',
            participants=doc.get('participants') or [],
            last_message=doc.get('last_message') or '',
            last_message_timestamp=doc.get('last_message_timestamp') or 0
        )


class TypingSignal:
    """Typing flag for one user.

    `is_typing` is the raw stored flag; `is_active` also applies the
    staleness TTL, so a client that died mid-type reads as not typing.
    """

    def __init__(self, user_key: str, is_typing: bool = False, timestamp: int = 0):
        self.user_key = user_key
        self.is_typing = is_typing
        self.timestamp = timestamp

    def is_active(self, now_ms: int, ttl_seconds: float) -> bool:
        if not self.is_typing:
            return False
        return now_ms - self.timestamp < ttl_seconds * 1000

    def to_dict(self, now_ms: int, ttl_seconds: float) -> Dict[str, Any]:
        return {
            'userId': self.user_key,
            'isTyping': self.is_active(now_ms, ttl_seconds),
            'timestamp': self.timestamp
        }

    @classmethod
    def from_doc(cls, user_key: str, doc: Optional[Dict[str, Any]]) -> 'TypingSignal':
        if not doc:
            return cls(user_key)
        return cls(
            user_key=user_key,
            is_typing=bool(doc.get('is_typing')),
            timestamp=doc.get('timestamp') or 0
        )


class MessagePage:
    """One page of history, oldest first, plus the cursor for the next older page."""

    def __init__(self, messages: List[Message], next_cursor: Optional[str]):
        self.messages = messages
        self.next_cursor = next_cursor

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'messages': [m.to_dict() for m in self.messages],
            'count': len(self.messages),
            'nextCursor': self.next_cursor,
            'hasMore': self.has_more
        }
