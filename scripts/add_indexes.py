"""Create the indexes used by chat history, inbox, search and reviews.

Usage:
    python scripts/add_indexes.py

Ensure MONGO_URI and MONGO_DB environment variables are set (or the YAML
database section). Safe to run repeatedly.
"""
import logging
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pymongo.errors import PyMongoError

from rehab_server.repository.mongo_helper import MongoRepositorySingleton, ensure_indexes

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def main():
    logger.info('Starting index migration...')
    db = MongoRepositorySingleton.get_db()
    try:
        ensure_indexes(db)
    except PyMongoError as e:
        logger.error(f'Index migration failed: {e}')
        return 1
    for name in ('messages', 'user_chat_rooms', 'listings', 'reviews', 'users'):
        logger.info(f'  {name}: {sorted(db[name].index_information())}')
    logger.info('Index migration complete.')
    return 0


if __name__ == '__main__':
    sys.exit(main())
