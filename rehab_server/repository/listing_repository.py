"""Listings repository.

Search queries only ever match the precomputed `keywords` array; there is
no substring or fuzzy matching against title or description.
"""
import logging
from typing import Optional, Dict, List

from pymongo import ASCENDING, DESCENDING

from rehab_server.repository.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ListingRepository(BaseRepository):
    """Repository for the `listings` collection."""

    def __init__(self, db, collection_name="listings"):
        super().__init__(db=db, collection_name=collection_name)

    def insert(self, doc: Dict) -> str:
        self.collection.insert_one(dict(doc))
        return doc['listing_id']

    def get(self, listing_id: str) -> Optional[Dict]:
        return self.collection.find_one({'listing_id': listing_id})

    def update_fields(self, listing_id: str, vendor_key: str, fields: Dict) -> int:
        result = self.collection.update_one(
            {'listing_id': listing_id, 'vendor_key': vendor_key},
            {'$set': fields}
        )
        return result.matched_count

    def delete_owned(self, listing_id: str, vendor_key: str) -> int:
        return self.collection.delete_one({'listing_id': listing_id, 'vendor_key': vendor_key}).deleted_count

    def list_by_vendor(self, vendor_key: str) -> List[Dict]:
        return list(self.collection.find({'vendor_key': vendor_key}).sort('created_at', DESCENDING))

    def find_by_keyword(self, keyword: str, limit: int) -> List[Dict]:
        """Listings whose keyword set contains `keyword`, cheapest first."""
        return list(self.collection.find({'keywords': keyword}).sort('price', ASCENDING).limit(limit))

    def find_in_geohash_range(self, keyword: str, start: str, end: str, limit: int) -> List[Dict]:
        """Listings with start <= geohash <= end that also carry `keyword`."""
        query = {
            'geohash': {'$gte': start, '$lte': end},
            'keywords': keyword
        }
        return list(self.collection.find(query).sort('geohash', ASCENDING).limit(limit))

    def titles_by_keyword(self, keyword: str, limit: int) -> List[str]:
        cursor = self.collection.find({'keywords': keyword}, {'title': 1}).limit(limit)
        return [doc.get('title') or '' for doc in cursor]
