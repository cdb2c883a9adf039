from typing import Optional, Dict, Any
from rehab_server.utils.helpers import normalize_doc


class ReviewDTO:
    def __init__(self, id: Optional[str], listingId: str, authorId: str, authorName: Optional[str] = None,
                 rating: int = 0, comment: str = '', createdAt: int = 0, updatedAt: Optional[int] = None):
        self.id = id
        self.listingId = listingId
        self.authorId = authorId
        self.authorName = authorName
        self.rating = int(rating or 0)
        self.comment = comment
        self.createdAt = createdAt
        self.updatedAt = updatedAt

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]):
        doc = normalize_doc(doc) or {}
        return cls(
            id=doc.get('review_id') or doc.get('_id'),
            listingId=doc.get('listing_id') or '',
            authorId=doc.get('author_key') or '',
            authorName=doc.get('author_name'),
            rating=doc.get('rating') or 0,
            comment=doc.get('comment') or '',
            createdAt=doc.get('created_at') or 0,
            updatedAt=doc.get('updated_at')
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'listingId': self.listingId,
            'authorId': self.authorId,
            'authorName': self.authorName,
            'rating': self.rating,
            'comment': self.comment,
            'createdAt': self.createdAt,
            'updatedAt': self.updatedAt
        }
