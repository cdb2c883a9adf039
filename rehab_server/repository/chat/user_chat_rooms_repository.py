"""User chat rooms repository.

Per-user inbox index: one document per (user_key, room_id) holding the
room summary. Written once per participant on every send; the two writes
are independent and may briefly disagree.
"""
import logging
from typing import Dict, List

from rehab_server.repository.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserChatRoomsRepository(BaseRepository):
    """Repository for user_chat_rooms - fast lookup of a user's conversations."""

    def __init__(self, db, collection_name="user_chat_rooms"):
        super().__init__(db=db, collection_name=collection_name)

    def update_summary(self, user_key: str, room_id: str, participants: List[str],
                       last_message: str, last_message_timestamp: int) -> bool:
        result = self.collection.update_one(
            {'user_key': user_key, 'room_id': room_id},
            {
                '$set': {
                    'participants': participants,
                    'last_message': last_message,
                    'last_message_timestamp': last_message_timestamp
                },
                '$setOnInsert': {
                    'user_key': user_key,
                    'room_id': room_id
                }
            },
            upsert=True
        )
        return result.modified_count > 0 or result.upserted_id is not None

    def list_for_user(self, user_key: str) -> List[Dict]:
        """All inbox entries of a user, unordered."""
        return list(self.collection.find({'user_key': user_key}))

    def get(self, user_key: str, room_id: str):
        return self.collection.find_one({'user_key': user_key, 'room_id': room_id})
