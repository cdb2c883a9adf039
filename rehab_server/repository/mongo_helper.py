from pymongo import MongoClient, ASCENDING, DESCENDING
import logging

from config import config


class MongoRepositorySingleton:
    _instance = None
    _db_instance = None

    @classmethod
    def get_db(cls):
        """Singleton utility to get the MongoDB database object.

        Uses MONGO_URI / MONGO_DB (via config). Every call made through the
        client is bounded by MONGO_TIMEOUT_MS so a stalled server surfaces as
        a retryable PyMongoError instead of hanging the request.
        """
        if cls._db_instance is not None:
            return cls._db_instance
        mongo_uri = config.MONGO_URI
        db_name = config.MONGO_DB_NAME
        timeout_ms = config.MONGO_TIMEOUT_MS
        logging.info(f"[MongoRepositorySingleton] Connecting to MongoDB DB: {db_name} (timeout {timeout_ms}ms)")
        client = MongoClient(
            mongo_uri,
            serverSelectionTimeoutMS=timeout_ms,
            connectTimeoutMS=timeout_ms,
            socketTimeoutMS=timeout_ms,
        )
        cls._db_instance = client[db_name]
        return cls._db_instance

    @classmethod
    def set_db(cls, db):
        """Use an already-built database (tests, scripts)."""
        cls._db_instance = db
        cls._instance = None

    @classmethod
    def reset(cls):
        cls._db_instance = None
        cls._instance = None

    @classmethod
    def get_instance(cls):
        return cls.__new__(cls)

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._init_repositories()
        return cls._instance

    def _init_repositories(self):
        from rehab_server.repository.user_repository import UserRepository
        from rehab_server.repository.listing_repository import ListingRepository
        from rehab_server.repository.review_repository import ReviewRepository
        from rehab_server.repository.chat.message_repository import MessageRepository
        from rehab_server.repository.chat.chat_room_repository import ChatRoomRepository
        from rehab_server.repository.chat.user_chat_rooms_repository import UserChatRoomsRepository
        from rehab_server.repository.chat.typing_repository import TypingRepository

        db = self.get_db()
        self.user = UserRepository(db)
        self.listing = ListingRepository(db)
        self.review = ReviewRepository(db)
        self.message = MessageRepository(db)
        self.chat_room = ChatRoomRepository(db)
        self.user_chat_rooms = UserChatRoomsRepository(db)
        self.typing = TypingRepository(db)
        logging.getLogger('rehab_server.mongo_helper').debug('Initialized repositories')


def ensure_indexes(db):
    """Create indexes used by the chat, search and review query paths (idempotent)."""
    logger = logging.getLogger('rehab_server.mongo_helper')
    db['messages'].create_index([('room_id', ASCENDING), ('key', ASCENDING)], unique=True, name='messages_room_key')
    db['user_chat_rooms'].create_index([('user_key', ASCENDING), ('room_id', ASCENDING)], unique=True,
                                       name='user_chat_rooms_user_room')
    db['listings'].create_index([('geohash', ASCENDING)], name='listings_geohash')
    db['listings'].create_index([('keywords', ASCENDING), ('price', ASCENDING)], name='listings_keywords_price')
    db['listings'].create_index([('vendor_key', ASCENDING), ('created_at', DESCENDING)], name='listings_vendor_created')
    db['reviews'].create_index([('listing_id', ASCENDING), ('created_at', DESCENDING)], name='reviews_listing_created')
    db['users'].create_index([('user_key', ASCENDING)], unique=True, name='users_user_key')
    logger.info('Ensured recommended DB indexes')
