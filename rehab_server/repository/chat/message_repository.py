"""Message log repository.

Messages are keyed per room by a server-assigned push key; ordering by
`key` is the authoritative conversation order.
"""
import logging
from typing import Optional, Dict, List

from pymongo import DESCENDING, ASCENDING

from rehab_server.repository.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class MessageRepository(BaseRepository):
    """Repository for the `messages` collection."""

    def __init__(self, db, collection_name="messages"):
        super().__init__(db=db, collection_name=collection_name)

    def append(self, doc: Dict) -> str:
        """Insert a new message document; returns its key."""
        self.collection.insert_one(dict(doc))
        return doc['key']

    def get(self, room_id: str, key: str) -> Optional[Dict]:
        return self.collection.find_one({'room_id': room_id, 'key': key})

    def get_many(self, room_id: str, keys: List[str]) -> List[Dict]:
        if not keys:
            return []
        return list(self.collection.find({'room_id': room_id, 'key': {'$in': list(keys)}}).sort('key', ASCENDING))

    def fetch_ending_at(self, room_id: str, cursor: Optional[str], limit: int) -> List[Dict]:
        """Up to `limit` newest messages with key <= cursor, newest first.

        With no cursor the newest messages of the room are returned.
        """
        query = {'room_id': room_id}
        if cursor:
            query['key'] = {'$lte': cursor}
        return list(self.collection.find(query).sort('key', DESCENDING).limit(limit))

    def fetch_all(self, room_id: str) -> List[Dict]:
        return list(self.collection.find({'room_id': room_id}).sort('key', ASCENDING))

    def set_reaction(self, room_id: str, key: str, user_key: str, reaction: str) -> bool:
        """Set or replace one user's reaction; prior value is overwritten."""
        result = self.collection.update_one(
            {'room_id': room_id, 'key': key},
            {'$set': {f'reactions.{user_key}': reaction}}
        )
        return result.matched_count > 0

    def add_reader(self, room_id: str, key: str, user_key: str) -> bool:
        """Add `user_key` to read_by unless they sent it or already read it.

        Returns True only when the document actually changed.
        """
        result = self.collection.update_one(
            {
                'room_id': room_id,
                'key': key,
                'sender_key': {'$ne': user_key},
                'read_by': {'$ne': user_key}
            },
            {'$addToSet': {'read_by': user_key}}
        )
        return result.modified_count > 0

    def count_unread(self, room_id: str, user_key: str) -> int:
        return self.collection.count_documents({
            'room_id': room_id,
            'sender_key': {'$ne': user_key},
            'read_by': {'$ne': user_key}
        })

    def unread_keys(self, room_id: str, user_key: str) -> List[str]:
        """Keys of messages in the room that `user_key` did not send and has not read."""
        cursor = self.collection.find(
            {'room_id': room_id, 'sender_key': {'$ne': user_key}, 'read_by': {'$ne': user_key}},
            {'key': 1}
        ).sort('key', ASCENDING)
        return [doc['key'] for doc in cursor]
