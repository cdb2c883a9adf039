from typing import Optional, Dict, Any
from rehab_server.utils.helpers import normalize_doc


class UserDTO:
    def __init__(self, userKey: str, displayName: Optional[str] = None, avatarUrl: Optional[str] = None,
                 location: Optional[Dict[str, float]] = None, createdAt: int = 0, lastSeenAt: int = 0):
        self.userKey = userKey
        self.displayName = displayName
        self.avatarUrl = avatarUrl
        self.location = location
        self.createdAt = createdAt
        self.lastSeenAt = lastSeenAt

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]):
        doc = normalize_doc(doc) or {}
        return cls(
            userKey=doc.get('user_key') or '',
            displayName=doc.get('display_name'),
            avatarUrl=doc.get('avatar_url'),
            location=doc.get('location'),
            createdAt=doc.get('created_at') or 0,
            lastSeenAt=doc.get('last_seen_at') or 0
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.userKey,
            'displayName': self.displayName,
            'avatarUrl': self.avatarUrl,
            'location': self.location,
            'createdAt': self.createdAt,
            'lastSeenAt': self.lastSeenAt
        }
