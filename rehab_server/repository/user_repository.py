from rehab_server.repository.base_repository import BaseRepository


class UserRepository(BaseRepository):
    def __init__(self, db, collection_name="users"):
        super().__init__(db=db, collection_name=collection_name)

    def upsert_on_login(self, user_key, defaults, now_ms):
        """Create the user on first authentication; existing profiles are left untouched."""
        on_insert = dict(defaults)
        on_insert.update({'user_key': user_key, 'created_at': now_ms})
        result = self.collection.update_one(
            {'user_key': user_key},
            {'$setOnInsert': on_insert, '$set': {'last_seen_at': now_ms}},
            upsert=True
        )
        return result.upserted_id is not None

    def update_profile(self, user_key, update_fields):
        return self.collection.update_one({'user_key': user_key}, {'$set': update_fields}).matched_count

    def get_by_user_key(self, user_key):
        return self.find_one({'user_key': user_key})

    def find_many_by_user_keys(self, user_keys):
        return list(self.collection.find({'user_key': {'$in': list(user_keys)}}))
