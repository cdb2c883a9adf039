"""Chat media upload and retrieval on GridFS."""
import logging
from typing import Any, Dict, Optional

from werkzeug.utils import secure_filename

from config import config
from rehab_server.exception import NotFoundError
from rehab_server.messaging.models import MediaType
from rehab_server.repository.media_repository import MediaRepository
from rehab_server.repository.mongo_helper import MongoRepositorySingleton
from rehab_server.security.session import Session, require_session
from rehab_server.utils.generator import get_current_timestamp_ms

logger = logging.getLogger(__name__)

MEDIA_URL_PREFIX = '/api/media/'


class MediaService:
    def __init__(self, media_repo: MediaRepository = None, clock=None, max_bytes: int = None):
        self.media = media_repo or MediaRepository(MongoRepositorySingleton.get_db())
        self.clock = clock or get_current_timestamp_ms
        self.max_bytes = max_bytes if max_bytes is not None else config.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    def build_path(self, filename: str) -> str:
        safe_name = secure_filename(filename or '') or 'upload'
        return f'{config.CHAT_MEDIA_PREFIX}/{self.clock()}_{safe_name}'

    def upload_media(self, session: Optional[Session], filename: str, content_type: Optional[str],
                     data: bytes) -> Dict[str, Any]:
        session = require_session(session)
        if not data:
            raise ValueError('file is empty')
        if len(data) > self.max_bytes:
            raise ValueError(f'file exceeds the {config.MAX_UPLOAD_SIZE_MB}MB upload limit')
        path = self.build_path(filename)
        content_type = content_type or 'application/octet-stream'
        self.media.put(path, data, content_type)
        logger.info(f"{session.user_key} uploaded {path}")
        return {
            'path': path,
            'url': f'{MEDIA_URL_PREFIX}{path}',
            'media_type': MediaType.from_content_type(content_type).value
        }

    def open_media(self, path: str):
        """Stored file object for `path` (readable, with `content_type`)."""
        stored = self.media.open(path)
        if stored is None:
            raise NotFoundError(f'Media {path} not found')
        return stored


_media_service = None


def get_media_service() -> MediaService:
    global _media_service
    if _media_service is None:
        _media_service = MediaService()
    return _media_service


def reset_media_service():
    global _media_service
    _media_service = None
