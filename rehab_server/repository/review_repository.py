import logging
from typing import Optional, Dict, List

from pymongo import DESCENDING

from rehab_server.repository.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ReviewRepository(BaseRepository):
    """Repository for listing reviews."""

    def __init__(self, db, collection_name="reviews"):
        super().__init__(db=db, collection_name=collection_name)

    def insert(self, doc: Dict) -> str:
        self.collection.insert_one(dict(doc))
        return doc['review_id']

    def get(self, review_id: str) -> Optional[Dict]:
        return self.collection.find_one({'review_id': review_id})

    def page_for_listing(self, listing_id: str, skip: int, limit: int) -> List[Dict]:
        cursor = (self.collection.find({'listing_id': listing_id})
                  .sort([('created_at', DESCENDING), ('review_id', DESCENDING)])
                  .skip(skip).limit(limit))
        return list(cursor)

    def count_for_listing(self, listing_id: str) -> int:
        return self.collection.count_documents({'listing_id': listing_id})

    def average_rating(self, listing_id: str) -> Optional[float]:
        pipeline = [
            {'$match': {'listing_id': listing_id}},
            {'$group': {'_id': None, 'avg': {'$avg': '$rating'}}}
        ]
        rows = list(self.collection.aggregate(pipeline))
        if not rows or rows[0].get('avg') is None:
            return None
        return round(rows[0]['avg'], 2)

    def update_owned(self, review_id: str, author_key: str, fields: Dict) -> int:
        return self.collection.update_one(
            {'review_id': review_id, 'author_key': author_key},
            {'$set': fields}
        ).matched_count

    def delete_owned(self, review_id: str, author_key: str) -> int:
        return self.collection.delete_one({'review_id': review_id, 'author_key': author_key}).deleted_count
