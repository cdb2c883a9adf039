"""Search endpoints.

- GET /api/search?q=<term>[&lat=<lat>&lng=<lng>]  - keyword search, by distance when located
- GET /api/search/autocomplete?q=<prefix>        - up to 5 matching titles
"""
import logging

from flask import Blueprint, request

from rehab_server.dto.listing_dto import ListingDTO
from rehab_server.services.search_service import get_search_service
from rehab_server.utils.decorators import handle_errors
from rehab_server.utils.helpers import respond_success, parse_location

logger = logging.getLogger(__name__)

search_bp = Blueprint('search', __name__, url_prefix='/api/search')


@search_bp.route('', methods=['GET'])
@handle_errors
def search():
    term = request.args.get('q', '')
    location = parse_location(request.args.get('lat'), request.args.get('lng'))
    results = [ListingDTO.from_doc(doc).to_dict() for doc in get_search_service().search(term, location)]
    return respond_success({'results': results, 'count': len(results), 'query': term})


@search_bp.route('/autocomplete', methods=['GET'])
@handle_errors
def autocomplete():
    suggestions = get_search_service().autocomplete(request.args.get('q', ''))
    return respond_success({'suggestions': suggestions})
