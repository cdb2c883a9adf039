"""Listing reviews: star rating 1..5 plus a comment, editable by the author only."""
import logging
from typing import Any, Dict, Optional

from config import config
from rehab_server.dto.review_dto import ReviewDTO
from rehab_server.exception import ForbiddenError, NotFoundError
from rehab_server.repository.mongo_helper import MongoRepositorySingleton
from rehab_server.security.session import Session, require_session
from rehab_server.utils.generator import generate_review_id, get_current_timestamp_ms

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def validate_rating(value) -> int:
    if isinstance(value, bool):
        raise ValueError('rating must be an integer between 1 and 5')
    try:
        rating = int(value)
    except (TypeError, ValueError):
        raise ValueError('rating must be an integer between 1 and 5')
    if rating != value and str(rating) != str(value).strip():
        raise ValueError('rating must be an integer between 1 and 5')
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValueError('rating must be between 1 and 5')
    return rating


def validate_comment(value) -> str:
    comment = (value or '').strip() if isinstance(value, str) else ''
    if not comment:
        raise ValueError('comment is required')
    return comment


class ReviewService:
    def __init__(self, review_repo=None, listing_repo=None, clock=None):
        repos = None
        if review_repo is None or listing_repo is None:
            repos = MongoRepositorySingleton.get_instance()
        self.reviews = review_repo or repos.review
        self.listings = listing_repo or repos.listing
        self.clock = clock or get_current_timestamp_ms

    def add_review(self, session: Optional[Session], listing_id: str, rating, comment: str) -> ReviewDTO:
        session = require_session(session)
        rating = validate_rating(rating)
        comment = validate_comment(comment)
        if not self.listings.get(listing_id):
            raise NotFoundError(f'Listing {listing_id} not found')
        doc = {
            'review_id': generate_review_id(),
            'listing_id': listing_id,
            'author_key': session.user_key,
            'author_name': session.display_name,
            'rating': rating,
            'comment': comment,
            'created_at': self.clock()
        }
        self.reviews.insert(doc)
        logger.info(f"Review {doc['review_id']} added to {listing_id} by {session.user_key}")
        return ReviewDTO.from_doc(doc)

    def list_reviews(self, listing_id: str, page: int = 1, page_size: int = None) -> Dict[str, Any]:
        """Newest-first page of reviews with the listing's average rating."""
        page_size = page_size or config.REVIEWS_PAGE_SIZE
        if page < 1:
            raise ValueError('page must be >= 1')
        docs = self.reviews.page_for_listing(listing_id, (page - 1) * page_size, page_size)
        total = self.reviews.count_for_listing(listing_id)
        return {
            'reviews': [ReviewDTO.from_doc(d).to_dict() for d in docs],
            'page': page,
            'total': total,
            'has_more': page * page_size < total,
            'average_rating': self.reviews.average_rating(listing_id)
        }

    def _owned(self, session: Session, review_id: str) -> Dict[str, Any]:
        doc = self.reviews.get(review_id)
        if not doc:
            raise NotFoundError(f'Review {review_id} not found')
        if doc.get('author_key') != session.user_key:
            logger.warning(f"{session.user_key} attempted to modify review {review_id}")
            raise ForbiddenError('Only the author can modify this review')
        return doc

    def update_review(self, session: Optional[Session], review_id: str, rating=None, comment=None) -> ReviewDTO:
        session = require_session(session)
        current = self._owned(session, review_id)
        updates = {}
        if rating is not None:
            updates['rating'] = validate_rating(rating)
        if comment is not None:
            updates['comment'] = validate_comment(comment)
        if not updates:
            return ReviewDTO.from_doc(current)
        updates['updated_at'] = self.clock()
        self.reviews.update_owned(review_id, session.user_key, updates)
        logger.info(f"Review {review_id} updated")
        current.update(updates)
        return ReviewDTO.from_doc(current)

    def delete_review(self, session: Optional[Session], review_id: str) -> bool:
        session = require_session(session)
        self._owned(session, review_id)
        deleted = self.reviews.delete_owned(review_id, session.user_key) > 0
        logger.info(f"Review {review_id} deleted by {session.user_key}")
        return deleted


_review_service = None


def get_review_service() -> ReviewService:
    global _review_service
    if _review_service is None:
        _review_service = ReviewService()
    return _review_service


def reset_review_service():
    global _review_service
    _review_service = None
