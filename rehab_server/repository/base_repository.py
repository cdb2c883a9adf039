from typing import Any, Dict, List, Optional


class BaseRepository:
    """Thin wrapper around one MongoDB collection.

    Concrete repositories add the query paths their service needs; the
    generic CRUD helpers below cover the simple cases.
    """

    def __init__(self, db, collection_name: str):
        self.db = db
        self.collection_name = collection_name
        self.collection = db[collection_name]

    def create(self, data: Dict[str, Any]):
        """Insert a new document into the collection."""
        return self.collection.insert_one(data).inserted_id

    def find(self, query: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Find multiple documents matching the query."""
        return list(self.collection.find(query or {}))

    def find_one(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Find a single document matching the query."""
        return self.collection.find_one(query)

    def update(self, query: Dict[str, Any], update_fields: Dict[str, Any]) -> int:
        """Update documents matching the query with the given fields."""
        result = self.collection.update_many(query, {'$set': update_fields})
        return result.modified_count

    def delete(self, query: Dict[str, Any]) -> int:
        """Delete documents matching the query."""
        result = self.collection.delete_many(query)
        return result.deleted_count
