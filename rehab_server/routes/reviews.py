"""Review endpoints.

- GET    /api/listings/<listing_id>/reviews?page=N  - 5 per page, newest first
- POST   /api/listings/<listing_id>/reviews         - add {rating, comment}
- PUT    /api/reviews/<review_id>                   - edit (author only)
- DELETE /api/reviews/<review_id>                   - delete (author only)
"""
import logging

from flask import Blueprint, request

from rehab_server.services.review_service import get_review_service
from rehab_server.utils.decorators import handle_errors, require_auth
from rehab_server.utils.helpers import respond_success, parse_page

logger = logging.getLogger(__name__)

reviews_bp = Blueprint('reviews', __name__, url_prefix='/api')


@reviews_bp.route('/listings/<listing_id>/reviews', methods=['GET'])
@handle_errors
def list_reviews(listing_id):
    return respond_success(get_review_service().list_reviews(listing_id, parse_page(request.args)))


@reviews_bp.route('/listings/<listing_id>/reviews', methods=['POST'])
@handle_errors
@require_auth
def add_review(listing_id, session):
    data = request.get_json(silent=True) or {}
    review = get_review_service().add_review(session, listing_id, data.get('rating'), data.get('comment'))
    return respond_success({'review': review.to_dict()}, status=201)


@reviews_bp.route('/reviews/<review_id>', methods=['PUT'])
@handle_errors
@require_auth
def update_review(review_id, session):
    data = request.get_json(silent=True) or {}
    review = get_review_service().update_review(session, review_id, data.get('rating'), data.get('comment'))
    return respond_success({'review': review.to_dict()})


@reviews_bp.route('/reviews/<review_id>', methods=['DELETE'])
@handle_errors
@require_auth
def delete_review(review_id, session):
    get_review_service().delete_review(session, review_id)
    return respond_success({'deleted': True, 'id': review_id})
