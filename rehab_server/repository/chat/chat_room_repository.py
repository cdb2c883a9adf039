"""Chat room repository.

A room document is created implicitly on the first message between two
users and then only has its last-message fields refreshed.
"""
import logging
from typing import Optional, Dict, List

from rehab_server.repository.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ChatRoomRepository(BaseRepository):
    """Repository for the `chat_rooms` collection."""

    def __init__(self, db, collection_name="chat_rooms"):
        super().__init__(db=db, collection_name=collection_name)

    def upsert_last_message(self, room_id: str, participants: List[str], text: str, timestamp: int) -> bool:
        """Create the room if needed and record its latest message.

        Returns True when this call created the room.
        """
        result = self.collection.update_one(
            {'room_id': room_id},
            {
                '$set': {
                    'last_message': text,
                    'last_message_timestamp': timestamp
                },
                '$setOnInsert': {
                    'room_id': room_id,
                    'participants': participants,
                    'created_at': timestamp
                }
            },
            upsert=True
        )
        created = result.upserted_id is not None
        if created:
            logger.info(f"Created chat room {room_id}")
        return created

    def get(self, room_id: str) -> Optional[Dict]:
        return self.collection.find_one({'room_id': room_id})
