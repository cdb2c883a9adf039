"""User profiles, created on first authentication and never hard-deleted."""
import logging
from typing import Optional

from rehab_server.dto.user_dto import UserDTO
from rehab_server.exception import NotFoundError
from rehab_server.repository.mongo_helper import MongoRepositorySingleton
from rehab_server.security.session import Session, require_session
from rehab_server.utils.generator import get_current_timestamp_ms
from rehab_server.utils.helpers import validate_location

logger = logging.getLogger(__name__)

_UNSET = object()


class UserService:
    def __init__(self, user_repo=None, clock=None):
        self.users = user_repo or MongoRepositorySingleton.get_instance().user
        self.clock = clock or get_current_timestamp_ms

    def ensure_user(self, session: Optional[Session], display_name: Optional[str] = None,
                    avatar_url: Optional[str] = None) -> UserDTO:
        session = require_session(session)
        defaults = {
            'display_name': display_name or session.display_name,
            'avatar_url': avatar_url,
            'location': None
        }
        if self.users.upsert_on_login(session.user_key, defaults, self.clock()):
            logger.info(f"Created user profile for {session.user_key}")
        return self.get_profile(session.user_key)

    def get_profile(self, user_key: str) -> UserDTO:
        doc = self.users.get_by_user_key(user_key)
        if not doc:
            raise NotFoundError(f'User {user_key} not found')
        return UserDTO.from_doc(doc)

    def update_profile(self, session: Optional[Session], display_name=_UNSET, avatar_url=_UNSET,
                       location=_UNSET) -> UserDTO:
        """Change only the fields passed; `location=None` clears the stored location."""
        session = require_session(session)
        updates = {}
        if display_name is not _UNSET:
            name = (display_name or '').strip()
            if not name:
                raise ValueError('display_name cannot be empty')
            updates['display_name'] = name
        if avatar_url is not _UNSET:
            updates['avatar_url'] = avatar_url
        if location is not _UNSET:
            updates['location'] = validate_location(location)
        if updates:
            updates['updated_at'] = self.clock()
            if not self.users.update_profile(session.user_key, updates):
                raise NotFoundError(f'User {session.user_key} not found')
            logger.info(f"Profile of {session.user_key} updated: {sorted(updates)}")
        return self.get_profile(session.user_key)


_user_service = None


def get_user_service() -> UserService:
    global _user_service
    if _user_service is None:
        _user_service = UserService()
    return _user_service


def reset_user_service():
    global _user_service
    _user_service = None
