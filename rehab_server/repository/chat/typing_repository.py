"""Typing indicator repository.

One mutable document per user: {is_typing, timestamp}.
"""
import logging
from typing import Optional, Dict

from rehab_server.repository.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TypingRepository(BaseRepository):
    """Repository for the `typing` collection."""

    def __init__(self, db, collection_name="typing"):
        super().__init__(db=db, collection_name=collection_name)

    def set_typing(self, user_key: str, is_typing: bool, timestamp: int) -> bool:
        result = self.collection.update_one(
            {'user_key': user_key},
            {
                '$set': {
                    'is_typing': bool(is_typing),
                    'timestamp': timestamp
                },
                '$setOnInsert': {'user_key': user_key}
            },
            upsert=True
        )
        return result.modified_count > 0 or result.upserted_id is not None

    def get(self, user_key: str) -> Optional[Dict]:
        return self.collection.find_one({'user_key': user_key})
